"""FollowRegistry — follow/unfollow spaces through the alias session.

Holds two relation collections: the spaces the current user follows, and
the followers of one space. Both are replaced wholesale by their loaders
and never patched locally, so right after a mutation they may be stale
until the reload completes.

Follow toggles for the same space are not mutually excluded. Two
overlapping calls can read the same snapshot and both submit; the server
decides what a double submission means.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from alias_delegation.config import DelegationSettings
from alias_delegation.errors import InvalidSessionState
from alias_delegation.session.alias_session import AliasSession
from alias_delegation.transport.models import FollowRecord, QueryDescriptor, QueryFilter
from alias_delegation.transport.protocols import (
    AuthProvider,
    MutationClient,
    QueryClient,
    SubscriptionToggle,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FollowRelation:
    """A confirmed follow link between a follower and a space."""

    space_id: str
    follower_address: str

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "FollowRelation":
        parsed = FollowRecord.model_validate(record)
        return cls(space_id=parsed.space, follower_address=parsed.follower)


class FollowRegistry:
    """Follow relations for the connected user and for a single space.

    Parameters
    ----------
    session:
        Alias session used to sign follow and unfollow.
    auth:
        The owner's primary wallet connection.
    query:
        Reads the ``follows`` relation.
    mutation:
        Submits ``follow`` / ``unfollow`` signed by the alias.
    subscriptions:
        Notification subscriptions; leaving a space also unsubscribes.
    settings:
        Load limit and registration retry budget.
    """

    def __init__(
        self,
        session: AliasSession,
        auth: AuthProvider,
        query: QueryClient,
        mutation: MutationClient,
        subscriptions: SubscriptionToggle,
        settings: Optional[DelegationSettings] = None,
    ) -> None:
        self._session = session
        self._auth = auth
        self._query = query
        self._mutation = mutation
        self._subscriptions = subscriptions
        self._settings = settings or DelegationSettings()

        self.following: list[FollowRelation] = []
        self.space_followers: list[FollowRelation] = []
        self.is_loading_follows = False
        self.is_loading_space_followers = False
        self.loading_follow = ""

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def following_spaces(self) -> list[str]:
        return [relation.space_id for relation in self.following]

    def is_following(self, space_id: str) -> bool:
        """True if the local snapshot holds ``(space_id, current account)``."""
        account = self._auth.account
        return any(
            relation.space_id == space_id and relation.follower_address == account
            for relation in self.following
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_follows(self, limit: Optional[int] = None) -> None:
        """Reload the spaces the current user follows.

        Silently does nothing while the user is not authenticated. On failure
        the previous collection is kept.
        """
        if not self._auth.is_authenticated:
            return

        self.is_loading_follows = True
        try:
            self.following = await self._fetch(
                QueryFilter(follower_in=self._auth.account), limit
            )
        except Exception:
            logger.exception("Loading follows for %s failed", self._auth.account)
        finally:
            self.is_loading_follows = False

    async def load_followers(self, space_id: str, limit: Optional[int] = None) -> None:
        """Reload the followers of *space_id*. On failure the previous collection is kept."""
        self.is_loading_space_followers = True
        try:
            self.space_followers = await self._fetch(QueryFilter(space_in=space_id), limit)
        except Exception:
            logger.exception("Loading followers of space %s failed", space_id)
        finally:
            self.is_loading_space_followers = False

    async def _fetch(self, query_filter: QueryFilter, limit: Optional[int]) -> list[FollowRelation]:
        descriptor = QueryDescriptor(
            filter=query_filter, first=limit if limit is not None else self._settings.follows_limit
        )
        records = await self._query.query("follows", descriptor)
        return [FollowRelation.from_record(record) for record in records]

    # ------------------------------------------------------------------
    # Follow / unfollow
    # ------------------------------------------------------------------

    async def request_follow(self, space_id: str) -> bool:
        """Entry point for a follow button.

        Does nothing while the wallet connection is still loading and asks
        for a login when no account is connected. Otherwise toggles the
        follow through :meth:`follow`.

        Returns
        -------
        bool
            ``True`` if a follow toggle was run.
        """
        if self._auth.is_loading:
            return False
        if not self._auth.account:
            self._auth.prompt_login()
            return False
        await self.follow(space_id)
        return True

    async def follow(self, space_id: str) -> None:
        """Follow *space_id*, or unfollow it if already followed.

        Registers a new alias when the current one is missing or invalid,
        at most ``follow_session_retries`` times. Errors are logged, never
        raised, and the busy marker is cleared on every exit.
        """
        owner = self._auth.account
        self.loading_follow = space_id
        try:
            alias = await self._ensure_session(owner)
            payload = {"from": owner, "space": space_id}
            if self.is_following(space_id):
                if self._subscriptions.is_subscribed(space_id):
                    await self._subscriptions.toggle(space_id)
                await self._mutation.submit(alias, "unfollow", payload)
                logger.info("Owner %s unfollowed space %s", owner, space_id)
            else:
                await self._mutation.submit(alias, "follow", payload)
                logger.info("Owner %s followed space %s", owner, space_id)
            await self.load_follows()
        except Exception:
            logger.exception("Follow toggle for space %s failed", space_id)
        finally:
            self.loading_follow = ""

    async def _ensure_session(self, owner: Optional[str]) -> Any:
        """Return a validated alias account, registering if needed.

        Raises
        ------
        InvalidSessionState
            If the alias is still invalid once the retry budget is spent.
        """
        retries = self._settings.follow_session_retries
        attempts = 0
        await self._session.check_validity(owner)
        while True:
            alias = self._session.derive_wallet(owner)
            if alias is not None and self._session.is_valid(owner):
                return alias
            if attempts >= retries:
                raise InvalidSessionState(owner, attempts)
            attempts += 1
            logger.info("Alias for %s missing or invalid, registering (attempt %d)", owner, attempts)
            await self._session.register(owner)
