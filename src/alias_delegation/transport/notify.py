"""Console notifier backed by rich."""
from __future__ import annotations

from typing import Optional

from rich.console import Console

from alias_delegation.transport.protocols import Severity

_STYLES = {
    Severity.INFO: "cyan",
    Severity.SUCCESS: "green",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}


class ConsoleNotifier:
    """Print notifications to a rich console, coloured by severity."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self._console = console or Console(stderr=True)

    def notify(self, severity: Severity, message: str) -> None:
        style = _STYLES.get(severity, "white")
        self._console.print(f"[{style}]{message}[/{style}]")
