"""DelegationContext — one client session's stores, session and registries.

Everything that must be shared by all consumers within a client session
(the alias key store, the validity cache, the follow collections) hangs
off one context object that the application creates at start-up and closes
at shutdown.

Example
-------
::

    from alias_delegation import DelegationContext, DelegationSettings

    async with DelegationContext.create(
        DelegationSettings(store_path=Path("~/.aliases.json").expanduser()),
        query=query_client,
        mutation=mutation_client,
        auth=wallet,
        notifier=ConsoleNotifier(),
        subscriptions=subscriptions,
    ) as ctx:
        await ctx.follows.load_follows()
        await ctx.follows.follow("space-1")
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from alias_delegation.config import DelegationSettings
from alias_delegation.follows.registry import FollowRegistry
from alias_delegation.session.alias_session import AliasSession
from alias_delegation.session.guard import ActionGuard
from alias_delegation.storage.alias_store import AliasStore
from alias_delegation.storage.backends import (
    FileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
)
from alias_delegation.transport.protocols import (
    AuthProvider,
    MutationClient,
    Notifier,
    QueryClient,
    SubscriptionToggle,
)

logger = logging.getLogger(__name__)


@dataclass
class DelegationContext:
    """Components wired together for one client session."""

    settings: DelegationSettings
    store: AliasStore
    session: AliasSession
    guard: ActionGuard
    follows: FollowRegistry

    @classmethod
    def create(
        cls,
        settings: Optional[DelegationSettings] = None,
        *,
        query: QueryClient,
        mutation: MutationClient,
        auth: AuthProvider,
        notifier: Notifier,
        subscriptions: SubscriptionToggle,
        backend: Optional[KeyValueStore] = None,
    ) -> "DelegationContext":
        """Build a context.

        When *backend* is omitted a :class:`FileKeyValueStore` is used if
        ``settings.store_path`` is set, otherwise a process-local
        :class:`MemoryKeyValueStore`.
        """
        settings = settings or DelegationSettings()
        if backend is None:
            if settings.store_path is not None:
                backend = FileKeyValueStore(settings.store_path)
            else:
                backend = MemoryKeyValueStore()

        store = AliasStore(backend, storage_key=settings.storage_key)
        session = AliasSession(store, query, mutation, auth, settings=settings)
        guard = ActionGuard(session, auth, notifier, failure_message=settings.failure_message)
        follows = FollowRegistry(session, auth, query, mutation, subscriptions, settings=settings)
        logger.debug("Delegation context created (backend=%s)", type(backend).__name__)
        return cls(settings=settings, store=store, session=session, guard=guard, follows=follows)

    def close(self) -> None:
        """Drop in-memory state. Persisted alias keys are kept."""
        self.session.invalidate()
        self.follows.following = []
        self.follows.space_followers = []
        logger.debug("Delegation context closed")

    async def __aenter__(self) -> "DelegationContext":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()
