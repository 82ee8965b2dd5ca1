"""SQLite implementation of TemplateStore.

One key/value table; the repository layer owns (de)serialization.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from threading import RLock
from typing import Callable, List, Optional, Union

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


def open_store_connection(db_path: Union[str, Path]) -> sqlite3.Connection:
    """Connection shared across threads; serialized by the store's lock."""
    if str(db_path) != MEMORY_DB:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


class SQLiteTemplateStore:
    """SQLite backend for serialized templates."""

    def __init__(self, db_path: Union[str, Path]) -> None:
        self._db_path = db_path if str(db_path) == MEMORY_DB else Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = RLock()
        self._ensure_schema()

    @property
    def db_path(self) -> Union[str, Path]:
        return self._db_path

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = open_store_connection(self._db_path)
        return self._conn

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                try:
                    self._conn.close()
                finally:
                    self._conn = None

    def _ensure_schema(self) -> None:
        with self._lock, self.conn:
            self.conn.execute(
                """
                CREATE TABLE IF NOT EXISTS template_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
        logger.debug(f"Template store ready at {self.db_path}")

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            row = self.conn.execute("SELECT value FROM template_store WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def put(self, key: str, value: str) -> None:
        with self._lock, self.conn:
            self.conn.execute(
                "INSERT INTO template_store(key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    def list(self, predicate: Callable[[str], bool] = lambda key: True) -> List[str]:
        with self._lock:
            rows = self.conn.execute("SELECT key FROM template_store ORDER BY key").fetchall()
        return [r["key"] for r in rows if predicate(r["key"])]

    def delete(self, key: str) -> None:
        with self._lock, self.conn:
            self.conn.execute("DELETE FROM template_store WHERE key = ?", (key,))
