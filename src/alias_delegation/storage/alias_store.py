"""AliasStore — persistent mapping from owner address to alias private key.

The whole mapping lives under one logical key of a
:class:`~alias_delegation.storage.backends.KeyValueStore`. Each owner maps
to exactly one hex-encoded private key; storing a second key for the same
owner replaces the first (re-registration), it is never merged.
"""
from __future__ import annotations

from typing import Optional

from alias_delegation.storage.backends import KeyValueStore


class AliasStore:
    """Owner address to alias private key mapping.

    Parameters
    ----------
    backend:
        Persistence medium. Every :meth:`set` is written through
        immediately.
    storage_key:
        Logical key holding the mapping inside *backend*.
    """

    def __init__(self, backend: KeyValueStore, storage_key: str = "aliases") -> None:
        self._backend = backend
        self._storage_key = storage_key

    def get(self, owner_address: str) -> Optional[str]:
        """Return the stored private key for *owner_address*, or ``None``."""
        return self._mapping().get(owner_address)

    def set(self, owner_address: str, private_key: str) -> None:
        """Store *private_key* for *owner_address*, replacing any previous key.

        Raises
        ------
        StorageUnavailable
            If the backend cannot persist the mapping. The caller must then
            treat the session as unestablished.
        """
        mapping = {**self._mapping(), owner_address: private_key}
        self._backend.write(self._storage_key, mapping)

    def owners(self) -> list[str]:
        """Return the sorted list of owners that have a stored alias."""
        return sorted(self._mapping())

    def __contains__(self, owner_address: object) -> bool:
        return owner_address in self._mapping()

    def _mapping(self) -> dict[str, str]:
        stored = self._backend.read(self._storage_key)
        if not isinstance(stored, dict):
            return {}
        return {str(owner): str(key) for owner, key in stored.items()}
