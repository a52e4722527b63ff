"""Key-value storage providers for the content store.

The store only needs ``get`` and ``set`` on string values, the same
surface as a browser's local storage.  Two providers ship here: an
in-memory dict and a single JSON file on disk.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStorage(Protocol):
    """Synchronous string key-value provider."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        ...

    def set(self, key: str, value: str) -> bool:
        """Store ``value`` under ``key``; return False if the write failed."""
        ...


class MemoryStorage:
    """Dict-backed provider; nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> bool:
        self._values[key] = value
        return True

    def keys(self) -> list[str]:
        return list(self._values)


class JsonFileStorage:
    """Provider persisting every key to one JSON object on disk.

    A missing or unreadable file behaves like empty storage.  Writes go
    to a sibling temp file that is then moved over the original, so a
    crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
            logger.warning("Unreadable storage file %s (%s), treating as empty", self._path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Storage file %s is not a JSON object, treating as empty", self._path)
            return {}
        return {k: v for k, v in raw.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> bool:
        values = self._read_all()
        values[key] = value
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(values, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self._path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.warning("Failed to write storage file %s: %s", self._path, exc)
            return False
        return True
