"""Collaborator interfaces consumed by the session and follow registry.

Everything here is structural (``typing.Protocol``); the transports, the
wallet connection and the notification UI live outside this package.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Optional, Protocol

from alias_delegation.transport.models import QueryDescriptor


class Severity(str, Enum):
    """Notification severity levels."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Signer(Protocol):
    """Anything that can sign EIP-712 messages, e.g. ``LocalAccount``."""

    @property
    def address(self) -> str: ...

    def sign_message(self, signable_message: Any) -> Any: ...


class QueryClient(Protocol):
    async def query(
        self, relation: str, descriptor: QueryDescriptor
    ) -> Sequence[Mapping[str, Any]]:
        """Return matching records of *relation* in server order."""
        ...


class MutationClient(Protocol):
    async def submit(self, signer: Signer, action: str, payload: Mapping[str, Any]) -> Any:
        """Sign and submit *action*; raise on failure."""
        ...


class AuthProvider(Protocol):
    """The owner's primary wallet connection."""

    @property
    def is_authenticated(self) -> bool: ...

    @property
    def is_loading(self) -> bool: ...

    @property
    def account(self) -> Optional[str]: ...

    @property
    def signer(self) -> Signer: ...

    def prompt_login(self) -> None: ...


class Notifier(Protocol):
    def notify(self, severity: Severity, message: str) -> None: ...


class SubscriptionToggle(Protocol):
    """Notification subscriptions for a space."""

    def is_subscribed(self, space_id: str) -> bool: ...

    async def toggle(self, space_id: str) -> None: ...
