"""Record backends for the user store."""

from .base import RecordBackend
from .memory import MemoryBackend
from .sqlite import SQLiteBackend, DEFAULT_DB_PATH

__all__ = ["RecordBackend", "MemoryBackend", "SQLiteBackend", "DEFAULT_DB_PATH"]
