"""User store: uniqueness and lookup over a record backend."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from lockbox.backends import RecordBackend, SQLiteBackend
from lockbox.errors import DuplicateUserError
from lockbox.models import UserRecord

logger = logging.getLogger(__name__)


class UserStore:
    """Owns all user records, keyed by username.

    A lock serializes inserts and lookups so concurrent registrations for one
    username cannot both succeed, even on backends without their own
    uniqueness constraint.

    Args:
        backend: Record backend to persist to.
    """

    def __init__(self, backend: RecordBackend) -> None:
        self._backend = backend
        self._lock = threading.Lock()

    @classmethod
    def open(cls, db_path: str) -> "UserStore":
        """Create a store over a SQLite database at ``db_path``."""
        return cls(SQLiteBackend(db_path))

    def insert(self, username: str, encoded_hash: str) -> UserRecord:
        """Persist a new record.

        Returns the stored record once it is durable.

        Raises:
            DuplicateUserError: if ``username`` is already registered.
            StoreError: if the backend fails.
        """
        record = UserRecord(
            username=username,
            password_hash=encoded_hash,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            if not self._backend.create(record):
                raise DuplicateUserError(username)
        logger.debug(f"Stored record for {username!r}")
        return record

    def find(self, username: str) -> Optional[UserRecord]:
        """Look up a user by username. Absence is None, not an error."""
        with self._lock:
            return self._backend.get(username)

    def list_users(self) -> list[UserRecord]:
        """Return all records ordered by username."""
        with self._lock:
            return self._backend.list_all()

    def count(self) -> int:
        return len(self.list_users())

    def close(self) -> None:
        """Close the underlying backend."""
        with self._lock:
            self._backend.close()
