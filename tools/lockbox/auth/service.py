"""Registration and login orchestration.

``AuthService`` is the boundary between the raising components (validator,
hasher, store) and callers, which receive plain result values::

    register: Validator -> UserStore.find -> CredentialHasher.hash -> UserStore.insert
    login:    UserStore.find -> CredentialHasher.verify

Login failures are never distinguished by cause.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from lockbox.auth.hasher import CredentialHasher
from lockbox.auth.store import UserStore
from lockbox.auth.validator import Validator
from lockbox.errors import (
    DuplicateUserError,
    HashError,
    StoreError,
    ValidationError,
    ValidationReason,
)

logger = logging.getLogger(__name__)


class AuthResult(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class RegistrationErrorKind(str, Enum):
    INVALID = "invalid"
    USER_EXISTS = "user_exists"
    HASH_FAILED = "hash_failed"
    STORAGE_FAILED = "storage_failed"


@dataclass(frozen=True)
class RegistrationError:
    """Why a registration did not go through.

    Attributes:
        kind: Failure category.
        reason: The failed policy rule, set only for ``INVALID``.
        message: Human-readable text safe to show the end user.
    """

    kind: RegistrationErrorKind
    reason: Optional[ValidationReason] = None
    message: str = ""


class AuthService:
    """Implements ``register`` and ``login`` over an explicitly passed store.

    Args:
        store: UserStore holding the records.
        hasher: CredentialHasher; a default-parameter one if omitted.
        validator: Validator; the default policy if omitted.
    """

    def __init__(
        self,
        store: UserStore,
        hasher: Optional[CredentialHasher] = None,
        validator: Optional[Validator] = None,
    ) -> None:
        self.store = store
        self.hasher = hasher or CredentialHasher()
        self.validator = validator or Validator()

    def register(self, username: str, password: str) -> Optional[RegistrationError]:
        """Register a new user. Returns None on success."""
        try:
            self.validator.validate(username, password)
        except ValidationError as e:
            logger.info(f"Registration rejected for {username!r}: {e.reason.value}")
            return RegistrationError(RegistrationErrorKind.INVALID, e.reason, str(e))

        try:
            if self.store.find(username) is not None:
                logger.info(f"Registration rejected for {username!r}: already exists")
                return _user_exists(username)
        except StoreError as e:
            logger.error(f"Lookup failed during registration of {username!r}: {e}")
            return _storage_failed()

        try:
            encoded = self.hasher.hash(password)
        except HashError as e:
            logger.error(f"Hashing failed during registration of {username!r}: {e}")
            return RegistrationError(
                RegistrationErrorKind.HASH_FAILED, message="Could not process password"
            )

        try:
            self.store.insert(username, encoded)
        except DuplicateUserError:
            # Lost a race with a concurrent registration.
            logger.info(f"Registration rejected for {username!r}: already exists")
            return _user_exists(username)
        except StoreError as e:
            logger.error(f"Insert failed during registration of {username!r}: {e}")
            return _storage_failed()

        logger.info(f"Registered user {username!r}")
        return None

    def login(self, username: str, password: str) -> AuthResult:
        """Authenticate a login attempt."""
        try:
            record = self.store.find(username)
        except StoreError as e:
            logger.error(f"Lookup failed during login of {username!r}: {e}")
            return AuthResult.FAILURE

        if record is None:
            try:
                self.hasher.dummy_verify(password)
            except HashError as e:
                logger.error(f"Dummy verification failed: {e}")
            logger.warning(f"Failed login attempt for {username!r}")
            return AuthResult.FAILURE

        try:
            ok = self.hasher.verify(password, record.password_hash)
        except HashError as e:
            logger.error(f"Stored hash for {username!r} is unusable: {e}")
            return AuthResult.FAILURE

        if not ok:
            logger.warning(f"Failed login attempt for {username!r}")
            return AuthResult.FAILURE

        logger.info(f"Successful login for {username!r}")
        return AuthResult.SUCCESS


def _user_exists(username: str) -> RegistrationError:
    return RegistrationError(
        RegistrationErrorKind.USER_EXISTS, message=f"User '{username}' already exists"
    )


def _storage_failed() -> RegistrationError:
    return RegistrationError(
        RegistrationErrorKind.STORAGE_FAILED, message="Could not save the account"
    )
