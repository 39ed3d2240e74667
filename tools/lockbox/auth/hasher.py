"""Argon2id password hashing with constant-time verification.

Hashes are stored as PHC strings::

    $argon2id$v=19$m=19456,t=2,p=1$<salt>$<digest>

Salt and digest are unpadded standard base64. Verification re-reads the cost
parameters and salt from the stored string, so records written under older
parameters keep verifying after ``HasherParams`` change. Legacy bcrypt
records (``$2a$``/``$2b$``/``$2y$``) are verified through bcrypt.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import logging
import os
from dataclasses import dataclass

import bcrypt
from argon2.exceptions import HashingError
from argon2.low_level import ARGON2_VERSION, Type, hash_secret, hash_secret_raw

from lockbox.errors import HashError, MalformedHashError

logger = logging.getLogger(__name__)

MIN_SALT_LEN = 16

_TYPES = {"argon2id": Type.ID, "argon2i": Type.I, "argon2d": Type.D}
_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
_BCRYPT_MAX_PASSWORD_BYTES = 72
_BCRYPT_CHECKSUM_LEN = 31
_LEGACY_ARGON2_VERSION = 0x10
_UINT32_MAX = 2**32 - 1
_BCRYPT_MIN_COST = 10


@dataclass(frozen=True)
class HasherParams:
    """Argon2id cost parameters used for new hashes.

    Defaults follow the OWASP baseline: 19 MiB, 2 iterations, 1 lane.
    ``memory_cost`` is in KiB.
    """

    time_cost: int = 2
    memory_cost: int = 19456
    parallelism: int = 1
    hash_len: int = 32
    salt_len: int = MIN_SALT_LEN

    def __post_init__(self) -> None:
        if self.salt_len < MIN_SALT_LEN:
            raise ValueError(f"salt_len must be at least {MIN_SALT_LEN} bytes")
        if self.time_cost < 1 or self.parallelism < 1 or self.hash_len < 16:
            raise ValueError("time_cost and parallelism must be >= 1, hash_len >= 16")
        if self.memory_cost < 8 * self.parallelism:
            raise ValueError("memory_cost must be at least 8 KiB per lane")


DEFAULT_PARAMS = HasherParams()


@dataclass(frozen=True)
class ParsedHash:
    """Fields of a decoded Argon2 PHC string."""

    type: Type
    version: int
    memory_cost: int
    time_cost: int
    parallelism: int
    salt: bytes
    digest: bytes


def constant_time_equals(a: bytes, b: bytes) -> bool:
    """Compare two byte strings without exiting early on the first mismatch."""
    return hmac.compare_digest(a, b)


def _uint32(value: str) -> int:
    number = int(value)
    if not 0 <= number <= _UINT32_MAX:
        raise ValueError("out of range")
    return number


def _encode_secret(password: str) -> bytes:
    # Lone surrogates come from undecodable argv or terminal bytes.
    return password.encode("utf-8", errors="surrogatepass")


def _b64decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.b64decode(padded.encode("ascii"), validate=True)


def parse_encoded(encoded: str) -> ParsedHash:
    """Decode an Argon2 PHC string.

    The version segment is optional; encodings without it predate version 19
    and are read as version 16.

    Raises:
        MalformedHashError: if the string is not a well-formed Argon2 hash.
    """
    parts = encoded.split("$")
    # Leading "$" yields an empty first part.
    if len(parts) not in (5, 6) or parts[0] != "":
        raise MalformedHashError("Unrecognized hash layout")

    hash_type = _TYPES.get(parts[1])
    if hash_type is None:
        raise MalformedHashError("Unsupported algorithm")

    version = _LEGACY_ARGON2_VERSION
    rest = parts[2:]
    if len(parts) == 6:
        if not rest[0].startswith("v="):
            raise MalformedHashError("Missing version segment")
        try:
            version = _uint32(rest[0][2:])
        except ValueError:
            raise MalformedHashError("Invalid version segment") from None
        rest = rest[1:]

    params_segment, salt_segment, digest_segment = rest
    try:
        params = dict(item.split("=", 1) for item in params_segment.split(","))
        memory_cost = _uint32(params.pop("m"))
        time_cost = _uint32(params.pop("t"))
        parallelism = _uint32(params.pop("p"))
    except (KeyError, ValueError):
        raise MalformedHashError("Invalid parameter segment") from None
    if params:
        raise MalformedHashError("Unexpected parameters")

    try:
        salt = _b64decode(salt_segment)
        digest = _b64decode(digest_segment)
    except (binascii.Error, ValueError):
        raise MalformedHashError("Invalid base64 in salt or digest") from None
    if not salt or not digest:
        raise MalformedHashError("Empty salt or digest")

    return ParsedHash(
        type=hash_type,
        version=version,
        memory_cost=memory_cost,
        time_cost=time_cost,
        parallelism=parallelism,
        salt=salt,
        digest=digest,
    )


class CredentialHasher:
    """Derives and verifies salted Argon2id password hashes.

    Args:
        params: Cost parameters for new hashes. Existing hashes are always
                verified with the parameters embedded in them.

    Raises:
        HashError: if the hash used for unknown-user checks cannot be built.
    """

    def __init__(self, params: HasherParams = DEFAULT_PARAMS) -> None:
        self.params = params
        self._dummy_hash = self.hash("lockbox-dummy-password")

    def hash(self, password: str) -> str:
        """Hash ``password`` with a fresh random salt.

        Raises:
            HashError: if the salt cannot be generated or Argon2 fails.
        """
        try:
            salt = os.urandom(self.params.salt_len)
        except (OSError, NotImplementedError) as e:
            raise HashError(f"Random salt generation failed: {e}") from e

        try:
            encoded = hash_secret(
                _encode_secret(password),
                salt,
                time_cost=self.params.time_cost,
                memory_cost=self.params.memory_cost,
                parallelism=self.params.parallelism,
                hash_len=self.params.hash_len,
                type=Type.ID,
                version=ARGON2_VERSION,
            )
        except HashingError as e:
            raise HashError(f"Argon2 hashing failed: {e}") from e

        return encoded.decode("ascii")

    def verify(self, password: str, encoded: str) -> bool:
        """Check ``password`` against a stored encoded hash.

        Returns False on a legitimate mismatch.

        Raises:
            MalformedHashError: if ``encoded`` cannot be parsed.
        """
        if encoded.startswith(_BCRYPT_PREFIXES):
            return self._verify_bcrypt(password, encoded)

        parsed = parse_encoded(encoded)
        try:
            candidate = hash_secret_raw(
                _encode_secret(password),
                parsed.salt,
                time_cost=parsed.time_cost,
                memory_cost=parsed.memory_cost,
                parallelism=parsed.parallelism,
                hash_len=len(parsed.digest),
                type=parsed.type,
                version=parsed.version,
            )
        except (HashingError, OverflowError) as e:
            # The stored parameters are out of Argon2's accepted range.
            raise MalformedHashError("Stored parameters rejected") from e

        return constant_time_equals(candidate, parsed.digest)

    def dummy_verify(self, password: str) -> None:
        """Run a full verification against a throwaway hash.

        Used when no record exists so that unknown usernames cost the same
        time as wrong passwords.
        """
        self.verify(password, self._dummy_hash)

    def _verify_bcrypt(self, password: str, encoded: str) -> bool:
        secret = _encode_secret(password)[:_BCRYPT_MAX_PASSWORD_BYTES]
        try:
            computed = bcrypt.hashpw(secret, encoded.encode("ascii"))
        except (ValueError, UnicodeEncodeError) as e:
            raise MalformedHashError("Invalid bcrypt hash") from e

        if int(encoded[4:6]) < _BCRYPT_MIN_COST:
            logger.warning(f"Legacy bcrypt hash uses weak cost factor {encoded[4:6]}")

        return constant_time_equals(
            computed[-_BCRYPT_CHECKSUM_LEN:],
            encoded.encode("ascii")[-_BCRYPT_CHECKSUM_LEN:],
        )
