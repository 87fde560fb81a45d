"""Synchronous key-value persistence for tracker collections.

Every tracker keeps its whole collection under one key as a JSON document.
Three interchangeable backends share the same get/set/remove contract:

- MemoryStore: JSON strings in a dict (tests, throwaway sessions)
- JsonFileStore: one <key>.json file per key in a directory
- SQLiteStore: a single kv_store table in a SQLite database

Reads fail soft and return the fallback; writes raise PersistenceError.
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from .config import Settings, settings as default_settings
from .errors import PersistenceError

logger = logging.getLogger(__name__)

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


class KeyValueStore(Protocol):
    """Key-value API used by PersistedCollection."""

    def get(self, key: str, fallback: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


def _dumps(key: str, value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise PersistenceError(key, f"value is not JSON-serializable: {exc}") from exc


def _loads(key: str, raw: str | None, fallback: Any) -> Any:
    if raw is None:
        return fallback
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored value for '%s' is not valid JSON; using fallback", key)
        return fallback


class MemoryStore:
    """In-process store that still round-trips values through JSON."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str, fallback: Any = None) -> Any:
        return _loads(key, self._data.get(key), fallback)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = _dumps(key, value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def raw(self, key: str) -> str | None:
        """Return the serialized value for a key (testing aid)."""
        return self._data.get(key)


class JsonFileStore:
    """Stores each key as <directory>/<key>.json.

    Writes go to a temporary file in the same directory and are moved into
    place, so a failed write never leaves a truncated document behind.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        safe_key = "".join(c if c.isalnum() or c in "-_." else "_" for c in key)
        return self.directory / f"{safe_key}.json"

    def get(self, key: str, fallback: Any = None) -> Any:
        path = self._path(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return fallback
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return fallback
        return _loads(key, raw, fallback)

    def set(self, key: str, value: Any) -> None:
        payload = _dumps(key, value)
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceError(key, str(exc)) from exc
        logger.debug("Wrote %d bytes to %s", len(payload), path)

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(key, str(exc)) from exc


class SQLiteStore:
    """Key-value table in a SQLite database file."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        if not self._initialized:
            conn.executescript(_SCHEMA_SQL)
            conn.commit()
            self._initialized = True
        return conn

    def get(self, key: str, fallback: Any = None) -> Any:
        try:
            conn = self._connect()
        except (sqlite3.Error, OSError) as exc:
            logger.warning("Could not open %s: %s", self.db_path, exc)
            return fallback
        try:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as exc:
            logger.warning("Could not read '%s' from %s: %s", key, self.db_path, exc)
            return fallback
        finally:
            conn.close()
        return _loads(key, row["value"] if row else None, fallback)

    def set(self, key: str, value: Any) -> None:
        payload = _dumps(key, value)
        now = datetime.now(timezone.utc).isoformat()
        try:
            conn = self._connect()
            try:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, payload, now),
                )
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(key, str(exc)) from exc

    def remove(self, key: str) -> None:
        try:
            conn = self._connect()
            try:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(key, str(exc)) from exc


def open_store(config: Settings | None = None) -> KeyValueStore:
    """Build the store configured in settings.storage."""
    config = config or default_settings
    backend = config.storage.backend
    if backend == "sqlite":
        return SQLiteStore(config.storage.sqlite_path)
    if backend == "json":
        return JsonFileStore(config.storage.json_dir)
    if backend == "memory":
        return MemoryStore()
    raise ValueError(f"Unknown storage backend: {backend!r}")
