"""
SQLite Key-Value Store
======================
Concrete implementation of KeyValueStore using SQLite.
"""

from pathlib import Path
from typing import Optional
from contextlib import contextmanager
import sqlite3

from pagepix.errors import StorageError
from pagepix.storage.repository import KeyValueStore


class SQLiteKeyValueStore(KeyValueStore):
    """
    SQLite implementation of the key-value store interface.

    A single ``kv`` table holds one row per key. Every operation opens its
    own short-lived connection, so the store is safe to share between the
    UI thread and background callers.
    """

    def __init__(self, db_path: Path | str = "data/pagepix.db"):
        """
        Initialize SQLite store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @contextmanager
    def _connection(self):
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self):
        """Initialize database schema."""
        try:
            with self._connection() as conn:
                conn.executescript("""
                    CREATE TABLE IF NOT EXISTS kv (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );
                """)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to initialize {self.db_path}: {e}", write=True) from e

    def get(self, key: str) -> Optional[str]:
        try:
            with self._connection() as conn:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StorageError(str(e), key=key) from e
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            with self._connection() as conn:
                conn.execute(
                    """
                    INSERT INTO kv (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value),
                )
        except sqlite3.Error as e:
            raise StorageError(str(e), key=key, write=True) from e

    def remove(self, key: str) -> None:
        try:
            with self._connection() as conn:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        except sqlite3.Error as e:
            raise StorageError(str(e), key=key, write=True) from e
