"""CLI entry point for alias-delegation.

Invoked as::

    alias-delegation [OPTIONS] COMMAND [ARGS]...

Commands
--------
version          Show version information
aliases list     List owners with a stored alias and their alias addresses
aliases show     Show the alias address stored for one owner

Private keys are never printed.
"""
from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console

from alias_delegation.config import DelegationSettings
from alias_delegation.errors import StorageUnavailable
from alias_delegation.keys import AliasKeyManager
from alias_delegation.storage import AliasStore, FileKeyValueStore

console = Console()


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(package_name="alias-delegation")
def cli() -> None:
    """Delegated signing sessions through ephemeral alias keys"""


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from alias_delegation import __version__

    console.print(f"[bold]alias-delegation[/bold] v{__version__}")


# ------------------------------------------------------------------
# aliases command group
# ------------------------------------------------------------------


@cli.group(name="aliases")
def aliases_group() -> None:
    """Inspect locally stored alias keys."""


_store_file_option = click.option(
    "--store-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="JSON key-value store holding the aliases (defaults to ALIAS_DELEGATION_STORE_PATH).",
)
_storage_key_option = click.option(
    "--storage-key",
    default=None,
    help="Logical key of the alias mapping inside the store.",
)


@aliases_group.command(name="list")
@_store_file_option
@_storage_key_option
def list_command(store_file: str | None, storage_key: str | None) -> None:
    """List every owner with a stored alias."""
    store = _open_store(store_file, storage_key)
    keys = AliasKeyManager()

    try:
        owners = store.owners()
    except StorageUnavailable as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    if not owners:
        console.print("[yellow]No aliases stored.[/yellow]")
        return

    console.print(f"[bold]Stored aliases[/bold] ({len(owners)})")
    for owner in owners:
        console.print(f"  [cyan]{owner}[/cyan]")
        console.print(f"    alias: {_alias_address(keys, store.get(owner))}")


@aliases_group.command(name="show")
@click.argument("owner")
@_store_file_option
@_storage_key_option
def show_command(owner: str, store_file: str | None, storage_key: str | None) -> None:
    """Show the alias address stored for OWNER."""
    store = _open_store(store_file, storage_key)

    try:
        private_key = store.get(owner)
    except StorageUnavailable as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    if private_key is None:
        console.print(f"[red]Error:[/red] No alias stored for owner {owner!r}.")
        sys.exit(1)

    console.print(f"  Owner: {owner}")
    console.print(f"  Alias: {_alias_address(AliasKeyManager(), private_key)}")


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _open_store(store_file: str | None, storage_key: str | None) -> AliasStore:
    """Return an AliasStore over the given file, falling back to settings."""
    settings = DelegationSettings()
    path = Path(store_file) if store_file else settings.store_path
    if path is None:
        console.print("[red]Error:[/red] --store-file or ALIAS_DELEGATION_STORE_PATH is required.")
        sys.exit(1)
    return AliasStore(FileKeyValueStore(path), storage_key=storage_key or settings.storage_key)


def _alias_address(keys: AliasKeyManager, private_key: str | None) -> str:
    if private_key is None:
        return "(none)"
    try:
        return keys.address_of(private_key)
    except ValueError:
        return "[red](unreadable key)[/red]"
