"""Password policy checks applied before any hashing or storage."""

from __future__ import annotations

from dataclasses import dataclass

from lockbox.errors import ValidationError, ValidationReason

SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

_DIGITS = frozenset("0123456789")
_UPPERCASE = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ")
_LOWERCASE = frozenset("abcdefghijklmnopqrstuvwxyz")


@dataclass(frozen=True)
class PasswordPolicy:
    """Rules a username/password pair must satisfy at registration.

    Attributes:
        min_length: Minimum password length in characters (at least 1).
        require_digit: Require at least one ASCII digit.
        require_username: Reject empty usernames.
        require_uppercase: Require at least one ASCII uppercase letter.
        require_lowercase: Require at least one ASCII lowercase letter.
        require_special: Require one character from ``SPECIAL_CHARACTERS``.
    """

    min_length: int = 8
    require_digit: bool = True
    require_username: bool = True
    require_uppercase: bool = False
    require_lowercase: bool = False
    require_special: bool = False

    def __post_init__(self) -> None:
        if self.min_length < 1:
            raise ValueError("min_length must be at least 1")


DEFAULT_POLICY = PasswordPolicy()


def validate(username: str, password: str, policy: PasswordPolicy = DEFAULT_POLICY) -> None:
    """Check credentials against ``policy``; the first failing rule wins.

    Raises:
        ValidationError: with the ``ValidationReason`` of the failed rule.
    """
    if policy.require_username and not username:
        raise ValidationError(ValidationReason.EMPTY_USERNAME)

    if len(password) < policy.min_length:
        raise ValidationError(
            ValidationReason.PASSWORD_TOO_SHORT,
            f"minimum {policy.min_length} characters",
        )

    chars = set(password)
    if policy.require_digit and not chars & _DIGITS:
        raise ValidationError(ValidationReason.PASSWORD_MISSING_DIGIT)
    if policy.require_uppercase and not chars & _UPPERCASE:
        raise ValidationError(ValidationReason.PASSWORD_MISSING_UPPERCASE)
    if policy.require_lowercase and not chars & _LOWERCASE:
        raise ValidationError(ValidationReason.PASSWORD_MISSING_LOWERCASE)
    if policy.require_special and not chars & set(SPECIAL_CHARACTERS):
        raise ValidationError(ValidationReason.PASSWORD_MISSING_SPECIAL)


class Validator:
    """Binds a ``PasswordPolicy`` for use by ``AuthService``."""

    def __init__(self, policy: PasswordPolicy = DEFAULT_POLICY) -> None:
        self.policy = policy

    def validate(self, username: str, password: str) -> None:
        validate(username, password, self.policy)
