"""
Durable key-value blob storage for the client (offline queue, cached session).

Backends only need get/set/remove of a single string blob. FileStorage writes
through a temp file and os.replace, so a failed write leaves the previous
blob intact.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from ..core.errors import StorageError

log = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]:
        """Return the blob stored under key, or None."""
        ...

    def set(self, key: str, value: str) -> None:
        """Atomically replace the blob stored under key."""
        ...

    def remove(self, key: str) -> None:
        """Delete the blob (no-op if absent)."""
        ...


class MemoryStorage:
    """Dict-backed storage; nothing touches disk."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        self._store[key] = value

    def remove(self, key: str) -> None:
        self._store.pop(key, None)


class FileStorage:
    """One file per key inside a directory."""

    def __init__(self, base_path: Path | str) -> None:
        self._base = Path(base_path)
        try:
            self._base.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"cannot create storage directory {self._base}: {exc}") from exc

    def _key_path(self, key: str) -> Path:
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self._base / f"{safe_key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._key_path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"cannot read {key}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self._key_path(key)
        try:
            fd, tmp = tempfile.mkstemp(dir=self._base, prefix=f".{path.stem}.", suffix=".tmp")
        except OSError as exc:
            raise StorageError(f"cannot write {key}: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, path)
        except OSError as exc:
            try:
                os.unlink(tmp)
            except FileNotFoundError:
                pass
            raise StorageError(f"cannot write {key}: {exc}") from exc
        log.debug("saved %s to %s", key, path)

    def remove(self, key: str) -> None:
        try:
            self._key_path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"cannot remove {key}: {exc}") from exc
