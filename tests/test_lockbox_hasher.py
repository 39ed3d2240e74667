#!/usr/bin/env python3
"""Unit tests for Argon2id hashing and verification."""

import base64
import logging
import sys
from pathlib import Path
from unittest.mock import patch

import bcrypt
import pytest
from argon2.low_level import Type, hash_secret

sys.path.insert(0, str(Path(__file__).parent.parent / "tools"))

from lockbox.auth import hasher as hasher_mod
from lockbox.auth.hasher import (
    CredentialHasher,
    HasherParams,
    constant_time_equals,
    parse_encoded,
)
from lockbox.errors import HashError, MalformedHashError

FAST_PARAMS = HasherParams(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture
def hasher():
    return CredentialHasher(FAST_PARAMS)


class TestHash:
    def test_encoding_is_self_describing(self, hasher):
        encoded = hasher.hash("longenough1")
        assert encoded.startswith("$argon2id$v=19$m=1024,t=1,p=1$")

        parsed = parse_encoded(encoded)
        assert parsed.type == Type.ID
        assert parsed.version == 19
        assert len(parsed.salt) == 16
        assert len(parsed.digest) == 32

    def test_never_contains_plaintext(self, hasher):
        encoded = hasher.hash("longenough1")
        assert "longenough1" not in encoded

    def test_same_password_gives_different_hashes(self, hasher):
        first = hasher.hash("longenough1")
        second = hasher.hash("longenough1")
        assert first != second
        assert hasher.verify("longenough1", first)
        assert hasher.verify("longenough1", second)

    def test_salt_len_respected(self):
        hasher = CredentialHasher(HasherParams(time_cost=1, memory_cost=1024, salt_len=24))
        assert len(parse_encoded(hasher.hash("pw")).salt) == 24

    def test_rng_failure_is_hash_error(self, hasher):
        with patch.object(hasher_mod.os, "urandom", side_effect=NotImplementedError("no rng")):
            with pytest.raises(HashError):
                hasher.hash("longenough1")

    def test_default_params(self):
        params = HasherParams()
        assert (params.memory_cost, params.time_cost, params.parallelism) == (19456, 2, 1)


class TestHasherParams:
    def test_rejects_short_salt(self):
        with pytest.raises(ValueError):
            HasherParams(salt_len=8)

    def test_rejects_low_memory(self):
        with pytest.raises(ValueError):
            HasherParams(memory_cost=4)


class TestVerify:
    def test_wrong_password_is_false(self, hasher):
        encoded = hasher.hash("longenough1")
        assert hasher.verify("wrongpass1", encoded) is False

    def test_old_parameters_still_verify(self, hasher):
        old = CredentialHasher(HasherParams(time_cost=2, memory_cost=2048, parallelism=2))
        encoded = old.hash("longenough1")
        assert hasher.verify("longenough1", encoded)

    def test_argon2i_encoding_verifies(self, hasher):
        encoded = hash_secret(
            b"longenough1", b"0123456789abcdef",
            time_cost=1, memory_cost=1024, parallelism=1, hash_len=32, type=Type.I,
        ).decode()
        assert hasher.verify("longenough1", encoded)
        assert not hasher.verify("longenough2", encoded)

    def test_version_16_without_version_segment(self, hasher):
        encoded = hash_secret(
            b"longenough1", b"0123456789abcdef",
            time_cost=1, memory_cost=1024, parallelism=1, hash_len=32,
            type=Type.ID, version=0x10,
        ).decode()
        parts = encoded.split("$")
        legacy = "$".join(p for p in parts if not p.startswith("v="))
        assert hasher.verify("longenough1", legacy)

    def test_legacy_bcrypt_verifies(self, hasher):
        encoded = bcrypt.hashpw(b"longenough1", bcrypt.gensalt(rounds=4)).decode()
        assert hasher.verify("longenough1", encoded)
        assert not hasher.verify("wrongpass1", encoded)

    def test_weak_bcrypt_cost_logs_warning(self, hasher, caplog):
        weak = bcrypt.hashpw(b"longenough1", bcrypt.gensalt(rounds=4)).decode()
        with caplog.at_level(logging.WARNING, logger="lockbox.auth.hasher"):
            assert hasher.verify("longenough1", weak)
        assert any("weak cost" in r.getMessage() for r in caplog.records)
        assert not any(weak in r.getMessage() for r in caplog.records)

    def test_standard_bcrypt_cost_is_quiet(self, hasher, caplog):
        encoded = bcrypt.hashpw(b"longenough1", bcrypt.gensalt(rounds=10)).decode()
        with caplog.at_level(logging.WARNING, logger="lockbox.auth.hasher"):
            assert hasher.verify("longenough1", encoded)
        assert not caplog.records

    def test_surrogate_password_round_trips(self, hasher):
        encoded = hasher.hash("longenough1\udcff")
        assert hasher.verify("longenough1\udcff", encoded)
        assert not hasher.verify("longenough1\udcfe", encoded)
        assert not hasher.verify("longenough1", encoded)

    def test_uses_constant_time_compare(self, hasher):
        encoded = hasher.hash("longenough1")
        with patch.object(hasher_mod, "constant_time_equals", return_value=False) as spy:
            assert hasher.verify("longenough1", encoded) is False
        spy.assert_called_once()

    def test_dummy_verify_runs(self, hasher):
        hasher.dummy_verify("anything1")
        hasher.dummy_verify("anything2")

    def test_dummy_hash_built_up_front(self, hasher):
        with patch.object(hasher, "hash", wraps=hasher.hash) as spy:
            hasher.dummy_verify("anything1")
        spy.assert_not_called()


class TestMalformed:
    @pytest.mark.parametrize(
        "encoded",
        [
            "",
            "plaintext",
            "$argon2id$v=19$m=1024,t=1,p=1$c2FsdHNhbHRzYWx0c2FsdA",
            "$scrypt$v=19$m=1024,t=1,p=1$c2FsdHNhbHRzYWx0c2FsdA$ZGlnZXN0ZGlnZXN0ZGlnZXN0",
            "$argon2id$v=xx$m=1024,t=1,p=1$c2FsdHNhbHRzYWx0c2FsdA$ZGlnZXN0ZGlnZXN0ZGlnZXN0",
            "$argon2id$v=19$m=1024,t=1$c2FsdHNhbHRzYWx0c2FsdA$ZGlnZXN0ZGlnZXN0ZGlnZXN0",
            "$argon2id$v=19$m=1024,t=1,p=1,k=2$c2FsdHNhbHRzYWx0c2FsdA$ZGlnZXN0ZGlnZXN0ZGlnZXN0",
            "$argon2id$v=19$m=1024,t=1,p=1$!!!$ZGlnZXN0ZGlnZXN0ZGlnZXN0",
            "$argon2id$v=19$m=1024,t=1,p=0$c2FsdHNhbHRzYWx0c2FsdA$ZGlnZXN0ZGlnZXN0ZGlnZXN0",
            "$2b$04$notavalidbcrypthash",
            "$argon2id$v=19$m=-1,t=1,p=1$c2FsdHNhbHRzYWx0c2FsdA$ZGlnZXN0ZGlnZXN0ZGlnZXN0",
            "$argon2id$v=19$m=99999999999,t=1,p=1$c2FsdHNhbHRzYWx0c2FsdA$ZGlnZXN0ZGlnZXN0ZGlnZXN0",
            "$argon2id$v=19$m=1024,t=4294967296,p=1$c2FsdHNhbHRzYWx0c2FsdA$ZGlnZXN0ZGlnZXN0ZGlnZXN0",
            "$argon2id$v=19$m=1024,t=1,p=-1$c2FsdHNhbHRzYWx0c2FsdA$ZGlnZXN0ZGlnZXN0ZGlnZXN0",
            "$argon2id$v=-3$m=1024,t=1,p=1$c2FsdHNhbHRzYWx0c2FsdA$ZGlnZXN0ZGlnZXN0ZGlnZXN0",
        ],
    )
    def test_malformed_raises(self, hasher, encoded):
        with pytest.raises(MalformedHashError):
            hasher.verify("longenough1", encoded)

    @pytest.mark.parametrize(
        "encoded",
        [
            "$scrypt$v=19$m=1024,t=1,p=1$c2FsdHNhbHRzYWx0c2FsdA$ZGlnZXN0ZGlnZXN0ZGlnZXN0",
            "$argon2id$v=19$m=1024,t=1,p=1,secretkey=2$c2FsdHNhbHRzYWx0c2FsdA$ZGlnZXN0ZGlnZXN0ZGlnZXN0",
            "$argon2id$v=19$m=99999999999,t=1,p=1$c2FsdHNhbHRzYWx0c2FsdA$ZGlnZXN0ZGlnZXN0ZGlnZXN0",
        ],
    )
    def test_error_messages_omit_hash_content(self, hasher, encoded):
        with pytest.raises(MalformedHashError) as exc_info:
            hasher.verify("longenough1", encoded)
        message = str(exc_info.value)
        for fragment in ("scrypt", "secretkey", "99999999999", "c2FsdHNh"):
            assert fragment not in message

    def test_malformed_is_hash_error(self):
        assert issubclass(MalformedHashError, HashError)

    def test_parse_round_trips_fields(self):
        salt = b"0123456789abcdef"
        encoded = hash_secret(
            b"pw", salt, time_cost=3, memory_cost=2048, parallelism=2, hash_len=24, type=Type.ID
        ).decode()
        parsed = parse_encoded(encoded)
        assert (parsed.memory_cost, parsed.time_cost, parsed.parallelism) == (2048, 3, 2)
        assert parsed.salt == salt
        assert len(parsed.digest) == 24
        assert base64.b64encode(salt).decode().rstrip("=") in encoded


class TestConstantTimeEquals:
    def test_equal(self):
        assert constant_time_equals(b"abc", b"abc")

    def test_different(self):
        assert not constant_time_equals(b"abc", b"abd")
        assert not constant_time_equals(b"abc", b"abcd")
