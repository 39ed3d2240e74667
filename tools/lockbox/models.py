"""User record model shared by the store and its backends."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class UserRecord:
    """Stored credential record.

    Attributes:
        username: Unique identity key.
        password_hash: Self-describing encoded hash. Hidden from repr.
        created_at: UTC timestamp of registration.
    """

    username: str
    password_hash: str = field(repr=False)
    created_at: datetime
