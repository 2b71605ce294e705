"""alias-delegation — delegated signing through ephemeral alias keys.

A user signs once to bind an alias address to their account; the alias key
then signs low-stakes actions (follow, unfollow, ...) on their behalf.

Public API
----------
The stable public surface is everything exported from this module.

Quick start
-----------
::

    from alias_delegation import (
        # Context
        DelegationContext, DelegationSettings,
        # Sessions
        AliasSession, ActionGuard, SessionState,
        # Storage
        AliasStore, FileKeyValueStore, MemoryKeyValueStore,
        # Follows
        FollowRegistry, FollowRelation,
        # Transport
        EnvelopeMutationClient, ConsoleNotifier, Severity,
    )
"""
from __future__ import annotations

__version__: str = "0.1.0"

from alias_delegation.config import DelegationSettings
from alias_delegation.context import DelegationContext
from alias_delegation.errors import (
    DelegationError,
    InvalidSessionState,
    StorageUnavailable,
    TransportFailure,
)
from alias_delegation.keys import AliasKeyManager

# ------------------------------------------------------------------
# Storage
# ------------------------------------------------------------------
from alias_delegation.storage import (
    AliasStore,
    FileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
)

# ------------------------------------------------------------------
# Sessions
# ------------------------------------------------------------------
from alias_delegation.session import (
    ActionGuard,
    AliasSession,
    AliasSessionState,
    RegistrationAttempt,
    RegistrationPhase,
    SessionState,
)

# ------------------------------------------------------------------
# Follows
# ------------------------------------------------------------------
from alias_delegation.follows import FollowRegistry, FollowRelation

# ------------------------------------------------------------------
# Transport
# ------------------------------------------------------------------
from alias_delegation.transport import (
    AliasRecord,
    ConsoleNotifier,
    EnvelopeMutationClient,
    FollowRecord,
    QueryDescriptor,
    QueryFilter,
    Severity,
)

__all__ = [
    "__version__",
    # context / config
    "DelegationContext",
    "DelegationSettings",
    # errors
    "DelegationError",
    "InvalidSessionState",
    "StorageUnavailable",
    "TransportFailure",
    # keys / storage
    "AliasKeyManager",
    "AliasStore",
    "FileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    # sessions
    "ActionGuard",
    "AliasSession",
    "AliasSessionState",
    "RegistrationAttempt",
    "RegistrationPhase",
    "SessionState",
    # follows
    "FollowRegistry",
    "FollowRelation",
    # transport
    "AliasRecord",
    "ConsoleNotifier",
    "EnvelopeMutationClient",
    "FollowRecord",
    "QueryDescriptor",
    "QueryFilter",
    "Severity",
]
