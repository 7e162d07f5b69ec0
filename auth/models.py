"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores, the token
issuer, and the auth service do the work; these types only carry shape.

Secrets never reach repr(): Identity.password_hash and CredentialPair.password
are declared with repr=False so an accidental log line or traceback cannot
print them.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class Identity:
    """A registered user, keyed by email.

    email is stored exactly as submitted (case-sensitive). password_hash is an
    Argon2 encoded string and never leaves the hasher/store boundary.
    """

    id: int
    email: str
    password_hash: str = field(repr=False)
    created_at: str | None = None


@dataclass(frozen=True)
class DuplicateIdentity:
    """Returned by the store when the email is already bound to an Identity."""

    email: str


@dataclass(frozen=True)
class CredentialPair:
    """Transient email + plaintext password for one register/login call."""

    email: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of a bearer token.

    subject is the Identity.id. Both timestamps are timezone-aware UTC.
    """

    subject: int
    email: str
    issued_at: datetime
    expires_at: datetime


class AuthFailure(str, Enum):
    """Business-level failure kinds surfaced to the calling layer.

    The value is the stable machine-readable error code; message is the
    human-readable text sent to clients.
    """

    CREDENTIALS_TAKEN = "credentials_taken"
    CREDENTIALS_INCORRECT = "credentials_incorrect"
    INVALID_TOKEN = "invalid_token"  # noqa: S105 -- error code, not a password

    @property
    def message(self) -> str:
        return _FAILURE_MESSAGES[self]


_FAILURE_MESSAGES = {
    AuthFailure.CREDENTIALS_TAKEN: "Credentials taken",
    AuthFailure.CREDENTIALS_INCORRECT: "Credentials incorrect",
    AuthFailure.INVALID_TOKEN: "Invalid or expired token",
}


@dataclass(frozen=True)
class AuthResult:
    """Outcome of AuthService.register() / AuthService.login().

    Exactly one of token / failure is set. Routes branch on ok and map the
    failure to a transport response; the service itself never raises for
    business outcomes.
    """

    token: str | None = field(default=None, repr=False)
    failure: AuthFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, token: str) -> AuthResult:
        return cls(token=token)

    @classmethod
    def fail(cls, failure: AuthFailure) -> AuthResult:
        return cls(failure=failure)
