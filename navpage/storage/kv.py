"""Key-value persistence port and its backends.

The bookmark store only ever talks to :class:`KeyValueStore`, a string to
string mapping with ``get``/``set`` semantics modelled on browser
``localStorage``. Backends decide where the strings live.
"""
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional

from navpage.app.config import Settings, get_settings
from navpage.storage.db import get_connection, init_db

logger = logging.getLogger("navpage.storage.kv")


class KeyValueStore(ABC):
    """Abstract string key-value storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``; absent keys are ignored."""
        ...


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store, used for tests and throwaway sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data = {**self._data, key: value}

    def delete(self, key: str) -> None:
        self._data = {k: v for k, v in self._data.items() if k != key}

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class JsonFileKeyValueStore(KeyValueStore):
    """All keys in one JSON object on disk, rewritten atomically on every set."""

    def __init__(self, path: Path):
        self.path = path

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Unreadable storage file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file %s is not a JSON object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix=".kv-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        self._write({**self._read(), key: value})

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            self._write({k: v for k, v in data.items() if k != key})


class SqliteKeyValueStore(KeyValueStore):
    """Embedded key-value table in a SQLite file."""

    def __init__(self, path: Path):
        self.path = path
        init_db(path)

    def get(self, key: str) -> Optional[str]:
        conn = get_connection(self.path)
        try:
            row = conn.execute(
                "SELECT value FROM local_storage WHERE key = ?", (key,)
            ).fetchone()
            return None if row is None else row["value"]
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        conn = get_connection(self.path)
        try:
            conn.execute(
                """INSERT INTO local_storage (key, value, updated_at)
                   VALUES (?, ?, ?)
                   ON CONFLICT(key) DO UPDATE SET
                     value=excluded.value,
                     updated_at=excluded.updated_at
                """,
                (key, value, datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

    def delete(self, key: str) -> None:
        conn = get_connection(self.path)
        try:
            conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()


BACKENDS = ("memory", "json", "sqlite")


def open_store(settings: Optional[Settings] = None) -> KeyValueStore:
    """Build the backend named by ``settings.storage_backend``."""
    settings = settings or get_settings()
    backend = settings.storage_backend.lower().strip()
    if backend == "memory":
        return MemoryKeyValueStore()
    if backend == "json":
        return JsonFileKeyValueStore(settings.storage_path)
    if backend == "sqlite":
        return SqliteKeyValueStore(settings.storage_path)
    raise ValueError(f"Unknown storage backend {backend!r}; expected one of {', '.join(BACKENDS)}")
