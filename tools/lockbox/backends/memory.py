"""In-process record backend, for tests and throwaway stores."""

from typing import Dict, List, Optional

from lockbox.backends.base import RecordBackend
from lockbox.models import UserRecord


class MemoryBackend(RecordBackend):
    """Dict-backed backend. Nothing survives the process."""

    def __init__(self) -> None:
        self._records: Dict[str, UserRecord] = {}

    def create(self, record: UserRecord) -> bool:
        if record.username in self._records:
            return False
        self._records[record.username] = record
        return True

    def get(self, username: str) -> Optional[UserRecord]:
        return self._records.get(username)

    def list_all(self) -> List[UserRecord]:
        return [self._records[name] for name in sorted(self._records)]
