"""Shared fixtures: in-memory fakes for every external collaborator."""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount

from alias_delegation.config import DelegationSettings
from alias_delegation.errors import TransportFailure
from alias_delegation.follows.registry import FollowRegistry
from alias_delegation.session.alias_session import AliasSession
from alias_delegation.session.guard import ActionGuard
from alias_delegation.storage.alias_store import AliasStore
from alias_delegation.storage.backends import MemoryKeyValueStore
from alias_delegation.transport.models import QueryDescriptor
from alias_delegation.transport.protocols import Severity


# ---------------------------------------------------------------------------
# Fake hub: query + mutation collaborators over shared server state
# ---------------------------------------------------------------------------


@dataclass
class FakeHub:
    """Server-side ``aliases`` and ``follows`` relations."""

    aliases: list[dict[str, Any]] = field(default_factory=list)
    follows: list[dict[str, Any]] = field(default_factory=list)
    # Return every alias record, newest first, ignoring the filter.
    ignore_filters: bool = False
    # Acknowledge alias submissions without recording them.
    drop_alias_records: bool = False
    fail_queries: bool = False
    fail_mutations: set[str] = field(default_factory=set)
    queries: list[tuple[str, QueryDescriptor]] = field(default_factory=list)
    submissions: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)

    def submitted(self, action: str) -> list[tuple[str, str, dict[str, Any]]]:
        return [entry for entry in self.submissions if entry[1] == action]


class FakeQueryClient:
    def __init__(self, hub: FakeHub) -> None:
        self.hub = hub

    async def query(self, relation: str, descriptor: QueryDescriptor) -> list[dict[str, Any]]:
        await asyncio.sleep(0)
        self.hub.queries.append((relation, descriptor))
        if self.hub.fail_queries:
            raise TransportFailure("query transport down")

        flt = descriptor.filter
        if relation == "aliases":
            if self.hub.ignore_filters:
                return list(reversed(self.hub.aliases))[: descriptor.first]
            matches = [
                record
                for record in self.hub.aliases
                if record["address"] == flt.address
                and record["alias"] == flt.alias
                and record["created"] > (flt.created_gt or 0)
            ]
            return matches[: descriptor.first]

        if relation == "follows":
            matches = [
                record
                for record in self.hub.follows
                if (flt.follower_in is None or record["follower"] == flt.follower_in)
                and (flt.space_in is None or record["space"]["id"] == flt.space_in)
            ]
            return matches[: descriptor.first]

        raise AssertionError(f"unexpected relation {relation!r}")


class FakeMutationClient:
    def __init__(self, hub: FakeHub) -> None:
        self.hub = hub

    async def submit(self, signer: Any, action: str, payload: dict[str, Any]) -> dict[str, Any]:
        await asyncio.sleep(0)
        self.hub.submissions.append((signer.address, action, dict(payload)))
        if action in self.hub.fail_mutations:
            raise TransportFailure(f"{action} rejected")

        if action == "alias":
            if not self.hub.drop_alias_records:
                self.hub.aliases.append(
                    {
                        "address": payload["from"],
                        "alias": payload["alias"],
                        "created": int(time.time()),
                    }
                )
        elif action == "follow":
            self.hub.follows.append(
                {"space": {"id": payload["space"]}, "follower": payload["from"]}
            )
        elif action == "unfollow":
            self.hub.follows = [
                record
                for record in self.hub.follows
                if not (
                    record["space"]["id"] == payload["space"]
                    and record["follower"] == payload["from"]
                )
            ]
        return {"id": f"{action}-{len(self.hub.submissions)}"}


# ---------------------------------------------------------------------------
# Wallet connection, subscriptions, notifications
# ---------------------------------------------------------------------------


@dataclass
class FakeAuth:
    owner: LocalAccount
    is_authenticated: bool = True
    is_loading: bool = False
    connected: bool = True
    login_prompts: int = 0

    @property
    def account(self) -> Optional[str]:
        return self.owner.address if self.connected else None

    @property
    def signer(self) -> LocalAccount:
        return self.owner

    def prompt_login(self) -> None:
        self.login_prompts += 1


@dataclass
class FakeSubscriptions:
    subscribed: set[str] = field(default_factory=set)
    toggles: list[str] = field(default_factory=list)

    def is_subscribed(self, space_id: str) -> bool:
        return space_id in self.subscribed

    async def toggle(self, space_id: str) -> None:
        await asyncio.sleep(0)
        self.toggles.append(space_id)
        self.subscribed ^= {space_id}


@dataclass
class RecordingNotifier:
    messages: list[tuple[Severity, str]] = field(default_factory=list)

    def notify(self, severity: Severity, message: str) -> None:
        self.messages.append((severity, message))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings() -> DelegationSettings:
    return DelegationSettings()


@pytest.fixture()
def hub() -> FakeHub:
    return FakeHub()


@pytest.fixture()
def owner() -> LocalAccount:
    return Account.create()


@pytest.fixture()
def auth(owner: LocalAccount) -> FakeAuth:
    return FakeAuth(owner=owner)


@pytest.fixture()
def query(hub: FakeHub) -> FakeQueryClient:
    return FakeQueryClient(hub)


@pytest.fixture()
def mutation(hub: FakeHub) -> FakeMutationClient:
    return FakeMutationClient(hub)


@pytest.fixture()
def subscriptions() -> FakeSubscriptions:
    return FakeSubscriptions()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def backend() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def store(backend: MemoryKeyValueStore) -> AliasStore:
    return AliasStore(backend)


@pytest.fixture()
def session(
    store: AliasStore,
    query: FakeQueryClient,
    mutation: FakeMutationClient,
    auth: FakeAuth,
    settings: DelegationSettings,
) -> AliasSession:
    return AliasSession(store, query, mutation, auth, settings=settings)


@pytest.fixture()
def guard(session: AliasSession, auth: FakeAuth, notifier: RecordingNotifier) -> ActionGuard:
    return ActionGuard(session, auth, notifier, failure_message="Something went wrong")


@pytest.fixture()
def registry(
    session: AliasSession,
    auth: FakeAuth,
    query: FakeQueryClient,
    mutation: FakeMutationClient,
    subscriptions: FakeSubscriptions,
    settings: DelegationSettings,
) -> FollowRegistry:
    return FollowRegistry(session, auth, query, mutation, subscriptions, settings=settings)


@pytest.fixture()
def bind_alias(hub: FakeHub):
    """Return a helper recording a server-side owner to alias binding."""

    def _bind(owner_address: str, alias_address: str, created: Optional[int] = None) -> None:
        hub.aliases.append(
            {
                "address": owner_address,
                "alias": alias_address,
                "created": int(time.time()) if created is None else created,
            }
        )

    return _bind
