"""SQLite-backed record backend."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from lockbox.backends.base import RecordBackend
from lockbox.errors import StoreError
from lockbox.models import UserRecord

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = ".lockbox/users.db"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    username TEXT PRIMARY KEY,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL
);
"""


class SQLiteBackend(RecordBackend):
    """Stores user records in a single SQLite table.

    Uniqueness is enforced by the ``username`` primary key, so a conflicting
    insert fails atomically inside SQLite.

    Args:
        db_path: Path to SQLite database file, or ":memory:". Parent
                 directories are created automatically.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH) -> None:
        self._db_path = db_path
        try:
            if db_path != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            # Shared across threads; UserStore serializes access.
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(_SCHEMA)
        except (sqlite3.Error, OSError) as e:
            raise StoreError(f"Cannot open database at {db_path}: {e}") from e
        logger.debug(f"Opened user database at {db_path}")

    def _row_to_record(self, row: sqlite3.Row) -> UserRecord:
        return UserRecord(
            username=row["username"],
            password_hash=row["password_hash"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def create(self, record: UserRecord) -> bool:
        try:
            self._conn.execute(
                "INSERT INTO users (username, password_hash, created_at) VALUES (?, ?, ?)",
                (record.username, record.password_hash, record.created_at.isoformat()),
            )
            self._conn.commit()
        except sqlite3.IntegrityError:
            self._conn.rollback()
            return False
        except sqlite3.Error as e:
            self._conn.rollback()
            raise StoreError(f"Insert failed: {e}") from e
        return True

    def get(self, username: str) -> Optional[UserRecord]:
        try:
            row = self._conn.execute(
                "SELECT * FROM users WHERE username = ?", (username,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Lookup failed: {e}") from e
        return self._row_to_record(row) if row else None

    def list_all(self) -> list[UserRecord]:
        try:
            rows = self._conn.execute("SELECT * FROM users ORDER BY username").fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Listing failed: {e}") from e
        return [self._row_to_record(r) for r in rows]

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
