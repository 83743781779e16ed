"""Key-value persistence for flags, cached URLs and timestamps."""

import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Protocol

import structlog

from ..errors import PersistenceError


class KeyValueStore(Protocol):
    """Last-writer-wins store of JSON-serializable values."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryKeyValueStore:
    """Process-local store, used for tests and ephemeral runs."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, Any] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._data)


class SQLiteKeyValueStore:
    """SQLite-based key-value store that survives process restarts."""

    def __init__(self, db_path: str = "startup_gate.db"):
        self.db_path = Path(db_path)
        self.logger = structlog.get_logger("store.kv")
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    @contextmanager
    def _get_connection(self):
        """Get database connection with proper error handling."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", error=str(e), db_path=str(self.db_path))
            raise PersistenceError(f"Database error: {e}", operation="connect") from e
        finally:
            if conn:
                conn.close()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            with self._get_connection() as conn:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()

        if row is None:
            return default

        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            raise PersistenceError(
                f"Corrupt value for {key}", operation="get", key=key
            ) from e

    def set(self, key: str, value: Any) -> None:
        try:
            encoded = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise PersistenceError(
                f"Value for {key} is not JSON-serializable", operation="set", key=key
            ) from e

        with self._lock:
            with self._get_connection() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
                    (key, encoded, datetime.now(timezone.utc).isoformat())
                )
                conn.commit()

        self.logger.debug("Value stored", key=key)

    def delete(self, key: str) -> None:
        with self._lock:
            with self._get_connection() as conn:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                conn.commit()
