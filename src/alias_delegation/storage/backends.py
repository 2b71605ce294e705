"""Key-value storage — abstract interface plus memory and filesystem backends.

KeyValueStore defines the storage contract: JSON-compatible values under
string keys. FileKeyValueStore persists all keys as one JSON document and
replaces it atomically on every write, so a write that has returned is
durable.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from alias_delegation.errors import StorageUnavailable

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Abstract base class for local key-value persistence."""

    @abstractmethod
    def read(self, key: str) -> Any | None:
        """Return the JSON value stored under *key*, or ``None`` if absent.

        Raises
        ------
        StorageUnavailable
            If the underlying medium cannot be read.
        """

    @abstractmethod
    def write(self, key: str, value: Any) -> None:
        """Persist *value* under *key*, replacing any previous value.

        Raises
        ------
        StorageUnavailable
            If the underlying medium cannot be written.
        """


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store. Values are JSON round-tripped on write so callers
    cannot mutate stored state through shared references."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def read(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    def write(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def __contains__(self, key: object) -> bool:
        return key in self._data


class FileKeyValueStore(KeyValueStore):
    """Filesystem-backed store holding every key in a single JSON document.

    Parameters
    ----------
    path:
        Location of the JSON document. Parent directories are created on
        the first write.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # KeyValueStore interface
    # ------------------------------------------------------------------

    def read(self, key: str) -> Any | None:
        return self._load().get(key)

    def write(self, key: str, value: Any) -> None:
        document = self._load()
        document[key] = value
        self._dump(document)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _load(self) -> dict[str, Any]:
        """Read the whole document; a missing file is an empty store."""
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StorageUnavailable(f"Cannot read {self._path}: {exc}") from exc

        try:
            document = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as exc:
            raise StorageUnavailable(f"Corrupt store document {self._path}: {exc}") from exc
        if not isinstance(document, dict):
            raise StorageUnavailable(f"Store document {self._path} is not a JSON object")
        return document

    def _dump(self, document: dict[str, Any]) -> None:
        """Write via temp file, fsync, then atomic rename."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(document, handle, indent=2, sort_keys=True)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageUnavailable(f"Cannot write {self._path}: {exc}") from exc
        logger.debug("Wrote key-value store %s", self._path)
