"""Key-value stores backing the upgrade prompt state.

The rate limiter only needs ``get``/``set``/``delete`` on string keys, so the
persistent and per-session state can live anywhere that offers those. Two
implementations ship here: an in-memory store (session scope, tests) and a
SQLite-backed store for state that must survive restarts.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol, runtime_checkable

from .exceptions import StorageError


logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal string key-value interface."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class InMemoryKeyValueStore:
    """Dict-backed store. State lives only as long as the instance."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


class SqliteKeyValueStore:
    """
    SQLite-backed key-value store.

    Opens a connection per operation, so one instance can be shared across
    request handlers.
    """

    def __init__(self, db_path: str | Path) -> None:
        """
        Initialize the store.

        Args:
            db_path: Path to the SQLite database file (created if missing)
        """
        self.db_path = Path(db_path)
        self._ensure_table_exists()
        logger.debug(f"Key-value store ready at {self.db_path}")

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open key-value store: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _ensure_table_exists(self) -> None:
        """Ensure the kv_store table exists."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

    def get(self, key: str) -> Optional[str]:
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read key: {e}", key=key) from e
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        updated_at = datetime.now(timezone.utc).isoformat()
        try:
            with self._get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, updated_at),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write key: {e}", key=key) from e

    def delete(self, key: str) -> None:
        try:
            with self._get_connection() as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete key: {e}", key=key) from e
