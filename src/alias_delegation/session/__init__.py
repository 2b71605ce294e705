"""Delegated-signing sessions: alias validity and the action guard."""
from __future__ import annotations

from alias_delegation.session.alias_session import (
    AliasSession,
    AliasSessionState,
    RegistrationAttempt,
    RegistrationPhase,
    SessionState,
)
from alias_delegation.session.guard import ActionGuard

__all__ = [
    "ActionGuard",
    "AliasSession",
    "AliasSessionState",
    "RegistrationAttempt",
    "RegistrationPhase",
    "SessionState",
]
