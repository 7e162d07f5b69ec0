"""Unit tests for auth/passwords.py -- Argon2id hashing and verification.

Covers:
- hash() output is self-describing Argon2id and salted per call
- verify() accepts the right password against every hash of it
- verify() returns False (never raises) on mismatch and on foreign/malformed hashes
- from_settings() carries configured cost parameters into the encoded hash
"""

from __future__ import annotations

import pytest

from auth.passwords import PasswordHasher
from core.config import Settings


class TestHash:
    def test_hash_is_argon2id_with_embedded_parameters(self, hasher: PasswordHasher) -> None:
        hashed = hasher.hash("secret1")
        assert hashed.startswith("$argon2id$v=19$")
        assert "m=1024,t=1,p=1" in hashed

    def test_hash_does_not_contain_plaintext(self, hasher: PasswordHasher) -> None:
        assert "secret1" not in hasher.hash("secret1")

    def test_same_input_hashes_differently(self, hasher: PasswordHasher) -> None:
        """Per-call salts: two hashes of one password differ, and both verify."""
        first = hasher.hash("secret1")
        second = hasher.hash("secret1")
        assert first != second
        assert hasher.verify(first, "secret1")
        assert hasher.verify(second, "secret1")


class TestVerify:
    def test_wrong_password_returns_false(self, hasher: PasswordHasher) -> None:
        assert hasher.verify(hasher.hash("secret1"), "wrong") is False

    def test_empty_password_does_not_match(self, hasher: PasswordHasher) -> None:
        assert hasher.verify(hasher.hash("secret1"), "") is False

    @pytest.mark.parametrize(
        "bad_hash",
        [
            "",
            "not-a-hash",
            "$2b$12$KIXQJ1q6Qz5x0cHk3p8xIeV0l2s2p7bQY7Qy8o9iUuB1s1l8bq7kW",  # bcrypt
            "$argon2id$v=19$m=1024,t=1,p=1$truncated",
            "$pbkdf2$é-not-argon",  # non-ASCII
        ],
    )
    def test_malformed_or_foreign_hash_returns_false(self, hasher: PasswordHasher, bad_hash: str) -> None:
        assert hasher.verify(bad_hash, "secret1") is False

    def test_verifies_hash_made_with_other_parameters(self, hasher: PasswordHasher) -> None:
        """Parameters come from the encoded hash, not from the verifying instance."""
        other = PasswordHasher(time_cost=2, memory_cost=2048, parallelism=2)
        assert hasher.verify(other.hash("secret1"), "secret1")

    def test_burn_does_not_raise(self, hasher: PasswordHasher) -> None:
        assert hasher.burn("anything") is None


def test_from_settings_uses_configured_costs() -> None:
    settings = Settings(
        jwt_secret="x" * 32,
        argon2_time_cost=2,
        argon2_memory_cost=2048,
        argon2_parallelism=1,
    )
    hashed = PasswordHasher.from_settings(settings).hash("secret1")
    assert "m=2048,t=2,p=1" in hashed
