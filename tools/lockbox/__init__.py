"""
Lockbox: local credential store.

Registers users with passwords and authenticates later login attempts against
the stored credentials.

Architecture:
    CLI → AuthService → Validator → CredentialHasher → UserStore → RecordBackend

Components:
    - Validator: Password policy checks, run before any hashing
    - CredentialHasher: Salted Argon2id hashes, constant-time verification
    - UserStore: Unique-by-username records over a pluggable backend
    - AuthService: register/login returning plain result values
"""

__version__ = "0.1.0"

from .auth import AuthResult, AuthService, RegistrationError, UserStore
from .errors import LockboxError

__all__ = [
    "AuthResult",
    "AuthService",
    "LockboxError",
    "RegistrationError",
    "UserStore",
]
