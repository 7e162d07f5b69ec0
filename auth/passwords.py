"""
auth/passwords.py -- Argon2id password hashing and verification.

Security design decisions:
  Argon2id (argon2-cffi): memory-hard, so each guess in an offline attack
       costs tens of MiB of RAM as well as CPU time -- GPU/ASIC farms lose
       most of their advantage. argon2-cffi generates a fresh 16-byte salt on
       every hash() call, so identical passwords produce different outputs.

  Self-describing output: the encoded string carries the variant, version,
       cost parameters, and salt ("$argon2id$v=19$m=65536,t=3,p=4$<salt>$<hash>").
       verify() reads them back, so changing the cost settings never breaks
       existing hashes.

  Constant-time comparison: argon2's verify compares digests in constant
       time; we never compare hash strings ourselves.

  Timing equalization [C1]: burn() runs a full verification against a dummy
       hash. AuthService.login() calls it when the email is unknown so response
       time does not reveal whether an account exists.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import argon2
from argon2.exceptions import InvalidHashError, VerificationError

if TYPE_CHECKING:
    from core.config import Settings

_DUMMY_PASSWORD = "bookmarks_timing_dummy"  # noqa: S105 -- never a real credential


class PasswordHasher:
    """Hash and verify plaintext passwords with Argon2id.

    Usage:
        hasher = PasswordHasher.from_settings(get_settings())
        stored = hasher.hash("secret1")
        hasher.verify(stored, "secret1")   # True
        hasher.verify(stored, "wrong")     # False
    """

    def __init__(
        self,
        time_cost: int = argon2.DEFAULT_TIME_COST,
        memory_cost: int = argon2.DEFAULT_MEMORY_COST,
        parallelism: int = argon2.DEFAULT_PARALLELISM,
    ) -> None:
        self._hasher = argon2.PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=argon2.Type.ID,
        )
        # Computed once so the first unknown-email login is not measurably
        # slower than later ones.
        self._dummy_hash = self._hasher.hash(_DUMMY_PASSWORD)

    @classmethod
    def from_settings(cls, settings: Settings) -> PasswordHasher:
        return cls(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
        )

    def hash(self, plaintext: str) -> str:
        """Return an Argon2id encoded hash of plaintext with a fresh random salt.

        argon2.exceptions.HashingError (resource exhaustion inside libargon2)
        is not caught -- it is fatal and must reach the caller unmodified.
        """
        return self._hasher.hash(plaintext)

    def verify(self, hashed: str, plaintext: str) -> bool:
        """Return True if plaintext matches hashed, False otherwise.

        Never raises on a mismatch or on a malformed or non-Argon2 hash
        (e.g. a legacy bcrypt string, or one with non-ASCII characters that
        argon2 cannot parse): both are simply "does not match".
        """
        if not hashed:
            return False
        try:
            return self._hasher.verify(hashed, plaintext)
        except (VerificationError, InvalidHashError, UnicodeEncodeError):
            return False

    def burn(self, plaintext: str) -> None:
        """Spend one verification's worth of work and discard the result [C1]."""
        self.verify(self._dummy_hash, plaintext)
