# =============================================================================
# marina_core/state/storage.py
# Durable key/value storage for operator settings
# =============================================================================
"""
Storage backends for the session-scoped settings (data source, forced mode,
connection frequency, offline simulation).

Values are stored as strings, the same way the browser stored them, so a
settings file written by one process can be read by the next run.
"""

from __future__ import annotations
import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path(__file__).parent.parent.parent / ".cache" / "marina_settings.json"


class StorageBackend(ABC):
    """Minimal synchronous key/value contract."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, persisting it before returning."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key if present."""

    @abstractmethod
    def clear(self) -> None:
        """Delete every key."""

    def snapshot(self) -> Dict[str, str]:
        """Copy of the stored items (for debugging and tests)."""
        return {}


class InMemoryStorage(StorageBackend):
    """Dictionary-backed storage used by tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})
        self.writes = 0

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value
        self.writes += 1

    def remove(self, key: str) -> None:
        self._items.pop(key, None)
        self.writes += 1

    def clear(self) -> None:
        self._items.clear()
        self.writes += 1

    def snapshot(self) -> Dict[str, str]:
        return dict(self._items)


class JsonFileStorage(StorageBackend):
    """
    Single JSON document on disk, rewritten on every mutation.

    The file is re-read on every get so that separately constructed stores
    (and other Streamlit sessions on the same host) see the latest value.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else DEFAULT_SETTINGS_PATH
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Settings file unreadable, starting empty: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, items: Dict[str, str]) -> None:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=".settings-", suffix=".json"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            items = self._load()
            items[key] = value
            self._write(items)

    def remove(self, key: str) -> None:
        with self._lock:
            items = self._load()
            if key in items:
                del items[key]
                self._write(items)

    def clear(self) -> None:
        with self._lock:
            self._write({})

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return self._load()


# Singleton accessor
_storage: Optional[StorageBackend] = None


def get_settings_storage(path: Optional[Path] = None) -> StorageBackend:
    """Get the process-wide settings storage (JSON file by default)."""
    global _storage
    if _storage is None:
        _storage = JsonFileStorage(path)
    return _storage
