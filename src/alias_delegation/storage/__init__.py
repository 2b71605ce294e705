"""Local persistence for alias keys."""
from __future__ import annotations

from alias_delegation.storage.alias_store import AliasStore
from alias_delegation.storage.backends import (
    FileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
)

__all__ = [
    "AliasStore",
    "FileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
]
