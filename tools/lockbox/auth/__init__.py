"""
Lockbox Auth: credential validation, hashing, storage and login.

Usage:
    from lockbox.auth import AuthService, UserStore

    store = UserStore.open(".lockbox/users.db")
    service = AuthService(store)
    service.register("alice", "longenough1")  # None on success
    service.login("alice", "longenough1")     # AuthResult.SUCCESS
"""

from .hasher import CredentialHasher, HasherParams, constant_time_equals
from .service import AuthResult, AuthService, RegistrationError, RegistrationErrorKind
from .store import UserStore
from .validator import PasswordPolicy, Validator, validate

__all__ = [
    "AuthResult",
    "AuthService",
    "CredentialHasher",
    "HasherParams",
    "PasswordPolicy",
    "RegistrationError",
    "RegistrationErrorKind",
    "UserStore",
    "Validator",
    "constant_time_equals",
    "validate",
]
