"""Record backend interface for the user store.

A backend is an opaque durable record store. ``UserStore`` layers the
uniqueness and lookup contract on top of it; backends only need
create-if-absent and point-lookup semantics.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from lockbox.models import UserRecord


class RecordBackend(ABC):
    """Abstract base class for user record storage.

    Implementations raise ``StoreError`` for I/O failures.
    """

    @abstractmethod
    def create(self, record: UserRecord) -> bool:
        """Persist ``record`` if no record with its username exists.

        Must be atomic with respect to the existence check and durable
        before returning.

        Returns:
            True if the record was written, False if the username was taken.
        """
        pass

    @abstractmethod
    def get(self, username: str) -> Optional[UserRecord]:
        """Return the record for ``username``, or None."""
        pass

    @abstractmethod
    def list_all(self) -> List[UserRecord]:
        """Return all records ordered by username."""
        pass

    def close(self) -> None:
        """Release any held resources. Default is a no-op."""
        pass
