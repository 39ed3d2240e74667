"""Exception hierarchy for Lockbox.

Components raise these; ``AuthService`` is the boundary that turns them into
``RegistrationError`` / ``AuthResult`` values for callers. Messages never carry
plaintext passwords or stored hashes.
"""

from __future__ import annotations

from enum import Enum


class LockboxError(Exception):
    """Base class for all Lockbox errors."""


class ValidationReason(str, Enum):
    """Why a username/password pair was rejected by the policy."""

    EMPTY_USERNAME = "empty_username"
    PASSWORD_TOO_SHORT = "password_too_short"
    PASSWORD_MISSING_DIGIT = "password_missing_digit"
    PASSWORD_MISSING_UPPERCASE = "password_missing_uppercase"
    PASSWORD_MISSING_LOWERCASE = "password_missing_lowercase"
    PASSWORD_MISSING_SPECIAL = "password_missing_special"


_REASON_MESSAGES = {
    ValidationReason.EMPTY_USERNAME: "Username cannot be empty",
    ValidationReason.PASSWORD_TOO_SHORT: "Password is too short",
    ValidationReason.PASSWORD_MISSING_DIGIT: "Password must contain at least one digit",
    ValidationReason.PASSWORD_MISSING_UPPERCASE: "Password must contain at least one uppercase letter",
    ValidationReason.PASSWORD_MISSING_LOWERCASE: "Password must contain at least one lowercase letter",
    ValidationReason.PASSWORD_MISSING_SPECIAL: "Password must contain at least one special character",
}


class ValidationError(LockboxError):
    """Credentials rejected by the password policy. Recoverable."""

    def __init__(self, reason: ValidationReason, detail: str = "") -> None:
        self.reason = reason
        message = _REASON_MESSAGES[reason]
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class HashError(LockboxError):
    """Hashing or verification could not be carried out."""


class MalformedHashError(HashError):
    """A stored encoded hash could not be parsed."""


class StoreError(LockboxError):
    """The record backend failed."""


class DuplicateUserError(StoreError):
    """A record for this username already exists."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"User '{username}' already exists")


class ConfigError(LockboxError):
    """Configuration file is unreadable or does not match the schema."""
