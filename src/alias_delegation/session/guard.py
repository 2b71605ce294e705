"""ActionGuard — run an action behind a delegated-signing session.

The guard is the recovery boundary for guarded actions: whatever fails
(validity check, registration or the action itself) is logged, reported
to the user through the notifier, and swallowed. At most one registration
precedes the single action invocation; the action is not guaranteed to run
with a confirmed-valid session.
"""
from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from alias_delegation.session.alias_session import AliasSession
from alias_delegation.transport.protocols import AuthProvider, Notifier, Severity

logger = logging.getLogger(__name__)

T = TypeVar("T")

Action = Callable[[], Union[Awaitable[T], T]]

DEFAULT_FAILURE_MESSAGE = "Oops, something went wrong!"


class ActionGuard:
    """Ensure an alias session exists, then run an action exactly once.

    Example
    -------
    ::

        guard = ActionGuard(session, auth, notifier)

        async def subscribe():
            alias = session.derive_wallet(auth.account)
            return await mutation.submit(alias, "follow", {...})

        ack = await guard.run(subscribe)
    """

    def __init__(
        self,
        session: AliasSession,
        auth: AuthProvider,
        notifier: Notifier,
        failure_message: str = DEFAULT_FAILURE_MESSAGE,
    ) -> None:
        self._session = session
        self._auth = auth
        self._notifier = notifier
        self._failure_message = failure_message
        self._busy = False

    @property
    def busy(self) -> bool:
        """True while a guarded action is in flight."""
        return self._busy

    async def run(self, action: Action[T]) -> Optional[T]:
        """Run *action* under the current owner's alias session.

        Returns
        -------
        The action's result, or ``None`` if anything failed.
        """
        owner = self._auth.account
        self._busy = True
        try:
            await self._session.check_validity(owner)
            if self._session.derive_wallet(owner) is not None and self._session.is_valid(owner):
                return await _invoke(action)
            await self._session.register(owner)
            return await _invoke(action)
        except Exception:
            logger.exception("Guarded action for owner %s failed", owner)
            self._notifier.notify(Severity.ERROR, self._failure_message)
            return None
        finally:
            self._busy = False


async def _invoke(action: Action[T]) -> Any:
    result = action()
    if inspect.isawaitable(result):
        return await result
    return result
