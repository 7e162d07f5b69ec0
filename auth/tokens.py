"""
auth/tokens.py -- Bearer token issuance and verification (JWT, HS256).

Security design decisions:
  JWT: python-jose with HS256. Tokens carry sub (identity id, as a string per
       RFC 7519), email, iat, and exp. The wire format is the standard compact
       JWS -- base64url(header).base64url(payload).base64url(signature) -- so
       any JWT-aware authorization middleware can consume it.

  Secret injection: TokenIssuer receives the signing secret at construction
       and keeps it for its lifetime. Nothing reads a module-level global. An
       empty or short secret raises ValueError immediately -- the process must
       never issue unsigned or weakly-signed tokens.

  Uniform failure: verify() returns None for every kind of failure (bad
       signature, malformed structure, expired, missing claims, alg mismatch).
       Callers cannot distinguish the reasons, so the verifier is not an
       oracle. The route layer turns None into a 401.

  Algorithm pinning: decode() is called with algorithms=["HS256"] only, so a
       token whose header claims "none" or an asymmetric alg is rejected.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from jose import JWTError, jwt

from auth.models import TokenClaims
from core.config import MIN_SECRET_LENGTH, TOKEN_TTL_SECONDS

if TYPE_CHECKING:
    from core.config import Settings

ALGORITHM = "HS256"

_DECODE_OPTIONS = {
    "require_exp": True,
    "require_iat": True,
    "require_sub": True,
    # Expiry is compared against the injected clock in TokenIssuer.verify().
    "verify_exp": False,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Issue and verify signed bearer tokens.

    Usage:
        issuer = TokenIssuer.from_settings(get_settings())
        token = issuer.issue(identity.id, identity.email)
        claims = issuer.verify(token)   # TokenClaims or None
    """

    def __init__(
        self,
        secret_key: str,
        expire_seconds: int = TOKEN_TTL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret_key:
            raise ValueError("Token signing secret is not configured.")
        if len(secret_key) < MIN_SECRET_LENGTH:
            raise ValueError(f"Token signing secret must be at least {MIN_SECRET_LENGTH} characters.")
        if expire_seconds <= 0:
            raise ValueError("Token lifetime must be positive.")
        self._secret_key = secret_key
        self._expire_seconds = expire_seconds
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenIssuer:
        return cls(
            secret_key=settings.jwt_secret.get_secret_value(),
            expire_seconds=settings.token_expire_seconds,
        )

    def __repr__(self) -> str:
        return f"TokenIssuer(algorithm={ALGORITHM!r}, expire_seconds={self._expire_seconds})"

    @property
    def expire_seconds(self) -> int:
        return self._expire_seconds

    def issue(self, subject_id: int, email: str) -> str:
        """Encode a signed JWT for the identity, expiring expire_seconds from now.

        Encoding errors from python-jose propagate: a token that cannot be
        signed must not be returned in any form.
        """
        issued_at = self._clock()
        payload = {
            "sub": str(subject_id),
            "email": email,
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self._expire_seconds),
        }
        return jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)

    def verify(self, token: str) -> TokenClaims | None:
        """Decode and verify a JWT. Returns TokenClaims, or None on any failure.

        python-jose checks the signature and claim presence; expiry is checked
        here against the issuer's clock. A token is valid only while now < exp,
        so it is already rejected in the exp second itself.
        """
        if not isinstance(token, str) or not token:
            return None
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[ALGORITHM], options=_DECODE_OPTIONS)
        except JWTError:
            return None
        claims = _payload_to_claims(payload)
        if claims is None or claims.expires_at <= self._clock():
            return None
        return claims


def _payload_to_claims(payload: dict) -> TokenClaims | None:
    sub = payload.get("sub")
    email = payload.get("email")
    # isdigit() alone admits Unicode digits such as "²" that int() rejects.
    if not isinstance(sub, str) or not (sub.isascii() and sub.isdigit()):
        return None
    if not isinstance(email, str) or not email:
        return None
    try:
        issued_at = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)
        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    except (KeyError, TypeError, ValueError, OverflowError, OSError):
        return None
    return TokenClaims(subject=int(sub), email=email, issued_at=issued_at, expires_at=expires_at)
