"""AliasSession — derive the alias signing identity and track its validity.

Validity is an in-memory, per-owner cache that is only ever changed by an
explicit :meth:`AliasSession.check_validity`, a registration, or
:meth:`AliasSession.invalidate`. It never expires on its own; the
validity window is the server's acceptance window for a binding, not a
client cache TTL.

Registration runs in two phases:

1. :meth:`AliasSession.commit_local` generates a keypair and persists it
   immediately, before anything is sent.
2. :meth:`AliasSession.confirm_remote` submits the owner-signed binding.

A failed second phase leaves the new key in the store; the next guarded
action will find it invalid and register again.
"""
from __future__ import annotations

import datetime
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from eth_account.signers.local import LocalAccount

from alias_delegation.config import DelegationSettings
from alias_delegation.keys import AliasKeyManager
from alias_delegation.storage.alias_store import AliasStore
from alias_delegation.transport.models import AliasRecord, QueryDescriptor, QueryFilter
from alias_delegation.transport.protocols import AuthProvider, MutationClient, QueryClient

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Cached validity of an owner's alias."""

    UNCHECKED = "unchecked"
    VALID = "valid"
    INVALID = "invalid"


class RegistrationPhase(str, Enum):
    """How far the most recent registration got."""

    LOCAL_COMMITTED = "local_committed"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class RegistrationAttempt:
    """Record of one alias registration.

    Parameters
    ----------
    owner_address:
        Owner the alias was generated for.
    alias_address:
        Address of the freshly generated alias.
    phase:
        Current phase. ``FAILED`` means the key is stored locally but the
        server never acknowledged the binding.
    error:
        Text of the submission error when ``phase`` is ``FAILED``.
    started_at:
        UTC datetime of the local commit.
    """

    owner_address: str
    alias_address: str
    phase: RegistrationPhase = RegistrationPhase.LOCAL_COMMITTED
    error: Optional[str] = None
    started_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )


@dataclass(frozen=True)
class AliasSessionState:
    """Point-in-time view of an owner's delegated-signing session."""

    owner_address: Optional[str]
    alias_address: Optional[str]
    is_valid: bool


class AliasSession:
    """Alias identity derivation, validity checks and registration.

    Parameters
    ----------
    store:
        Persistent owner to private key mapping.
    query:
        Reads the server-side ``aliases`` relation.
    mutation:
        Submits the signed ``alias`` binding.
    auth:
        Provides the owner's primary signer for registration.
    settings:
        Validity window and lookup limit.
    key_manager:
        Key generation and derivation; defaults to :class:`AliasKeyManager`.
    clock:
        Returns the current time in seconds since the epoch.
    """

    def __init__(
        self,
        store: AliasStore,
        query: QueryClient,
        mutation: MutationClient,
        auth: AuthProvider,
        settings: Optional[DelegationSettings] = None,
        key_manager: Optional[AliasKeyManager] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._query = query
        self._mutation = mutation
        self._auth = auth
        self._settings = settings or DelegationSettings()
        self._keys = key_manager or AliasKeyManager()
        self._clock = clock
        self._states: dict[str, SessionState] = {}
        self._last_registration: Optional[RegistrationAttempt] = None

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def derive_wallet(self, owner_address: Optional[str]) -> Optional[LocalAccount]:
        """Return the alias account stored for *owner_address*, or ``None``."""
        if not owner_address:
            return None
        private_key = self._store.get(owner_address)
        if private_key is None:
            return None
        return self._keys.derive(private_key)

    # ------------------------------------------------------------------
    # Validity cache
    # ------------------------------------------------------------------

    def state(self, owner_address: Optional[str]) -> SessionState:
        if not owner_address:
            return SessionState.UNCHECKED
        return self._states.get(owner_address, SessionState.UNCHECKED)

    def is_valid(self, owner_address: Optional[str]) -> bool:
        return self.state(owner_address) is SessionState.VALID

    def snapshot(self, owner_address: Optional[str]) -> AliasSessionState:
        wallet = self.derive_wallet(owner_address)
        return AliasSessionState(
            owner_address=owner_address,
            alias_address=wallet.address if wallet is not None else None,
            is_valid=self.is_valid(owner_address),
        )

    def invalidate(self, owner_address: Optional[str] = None) -> None:
        """Forget cached validity for one owner, or for all when ``None``."""
        if owner_address is None:
            self._states.clear()
        else:
            self._states.pop(owner_address, None)

    async def check_validity(self, owner_address: Optional[str]) -> SessionState:
        """Ask the server whether the owner's current alias is bound to it.

        Leaves the cached state untouched when *owner_address* is unset or
        no alias is stored. Transport errors propagate.

        Returns
        -------
        SessionState
            The owner's state after the check.
        """
        wallet = self.derive_wallet(owner_address)
        if not owner_address or wallet is None:
            return self.state(owner_address)

        window = int(self._settings.validity_window.total_seconds())
        descriptor = QueryDescriptor(
            filter=QueryFilter(
                address=owner_address,
                alias=wallet.address,
                created_gt=int(self._clock()) - window,
            ),
            first=self._settings.alias_lookup_limit,
        )
        records = await self._query.query("aliases", descriptor)

        # The filter is repeated here in case the server ignored it.
        first = AliasRecord.model_validate(records[0]) if records else None
        valid = (
            first is not None
            and first.address == owner_address
            and first.alias == wallet.address
        )
        current = self.derive_wallet(owner_address)
        if current is None or current.address != wallet.address:
            # The alias was replaced while the query was in flight.
            logger.debug("Alias for owner %s changed during check, result discarded", owner_address)
            return self.state(owner_address)
        new_state = SessionState.VALID if valid else SessionState.INVALID
        self._states[owner_address] = new_state
        logger.debug("Alias %s for owner %s is %s", wallet.address, owner_address, new_state.value)
        return new_state

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    @property
    def last_registration(self) -> Optional[RegistrationAttempt]:
        return self._last_registration

    def commit_local(self, owner_address: Optional[str]) -> LocalAccount:
        """Generate a new alias for *owner_address* and persist it.

        Raises
        ------
        ValueError
            If *owner_address* is empty.
        StorageUnavailable
            If the key could not be persisted.
        """
        if not owner_address:
            raise ValueError("An owner address is required to register an alias.")
        account = self._keys.generate()
        self._store.set(owner_address, self._keys.export_key(account))
        # Any cached state belonged to the replaced alias.
        self._states.pop(owner_address, None)
        self._last_registration = RegistrationAttempt(
            owner_address=owner_address, alias_address=account.address
        )
        logger.info("Stored new alias %s for owner %s", account.address, owner_address)
        return account

    async def confirm_remote(self, owner_address: str, alias_address: str) -> None:
        """Submit the owner-signed binding of *alias_address* to *owner_address*.

        Submission errors propagate; the locally stored key is kept.
        """
        attempt = self._last_registration
        if (
            attempt is None
            or attempt.owner_address != owner_address
            or attempt.alias_address != alias_address
        ):
            attempt = RegistrationAttempt(owner_address=owner_address, alias_address=alias_address)
            self._last_registration = attempt

        try:
            await self._mutation.submit(
                self._auth.signer, "alias", {"from": owner_address, "alias": alias_address}
            )
        except Exception as exc:
            attempt.phase = RegistrationPhase.FAILED
            attempt.error = str(exc)
            logger.warning("Alias %s registration for %s failed: %s", alias_address, owner_address, exc)
            raise
        attempt.phase = RegistrationPhase.CONFIRMED
        logger.info("Registered alias %s for owner %s", alias_address, owner_address)

    async def register(self, owner_address: Optional[str]) -> LocalAccount:
        """Generate, persist and register a new alias, then re-check validity.

        Returns
        -------
        LocalAccount
            The newly generated alias account.
        """
        account = self.commit_local(owner_address)
        await self.confirm_remote(owner_address, account.address)  # type: ignore[arg-type]
        await self.check_validity(owner_address)
        return account
