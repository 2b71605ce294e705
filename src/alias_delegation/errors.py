"""Error taxonomy for delegated signing sessions.

AliasStore and AliasSession never swallow these; ActionGuard and
FollowRegistry are the only places they are caught.
"""
from __future__ import annotations


class DelegationError(Exception):
    """Base class for all alias-delegation errors."""


class StorageUnavailable(DelegationError):
    """Raised when the local key-value persistence cannot be read or written."""


class TransportFailure(DelegationError):
    """Raised when a query or mutation collaborator fails."""


class InvalidSessionState(DelegationError):
    """Raised when no valid alias session could be established for an owner.

    Parameters
    ----------
    owner_address:
        The owner whose alias failed validation.
    attempts:
        Number of registrations attempted before giving up.
    """

    def __init__(self, owner_address: str | None, attempts: int = 0) -> None:
        self.owner_address = owner_address
        self.attempts = attempts
        super().__init__(
            f"No valid alias session for owner {owner_address!r} "
            f"after {attempts} registration attempt(s)."
        )
