"""Collaborator interfaces, wire models and the envelope signer."""
from __future__ import annotations

from alias_delegation.transport.envelope import (
    ACTION_TYPES,
    EnvelopeMutationClient,
    build_typed_data,
    sign_typed_data,
)
from alias_delegation.transport.models import (
    AliasRecord,
    FollowRecord,
    QueryDescriptor,
    QueryFilter,
)
from alias_delegation.transport.notify import ConsoleNotifier
from alias_delegation.transport.protocols import (
    AuthProvider,
    MutationClient,
    Notifier,
    QueryClient,
    Severity,
    Signer,
    SubscriptionToggle,
)

__all__ = [
    "ACTION_TYPES",
    "AliasRecord",
    "AuthProvider",
    "ConsoleNotifier",
    "EnvelopeMutationClient",
    "FollowRecord",
    "MutationClient",
    "Notifier",
    "QueryClient",
    "QueryDescriptor",
    "QueryFilter",
    "Severity",
    "Signer",
    "SubscriptionToggle",
    "build_typed_data",
    "sign_typed_data",
]
