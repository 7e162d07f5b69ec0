"""
auth/dependencies.py -- FastAPI Depends() helpers for bearer authentication.

Protected endpoints present the token as:
    Authorization: Bearer <token>

try_get_current_claims() is the soft variant (returns None on failure).
get_current_claims() wraps it and raises HTTP 401 if unauthenticated.

Every failure -- missing header, wrong scheme, bad signature, expired
token -- produces the same 401 "invalid_token" response.

Layer rule: no imports from api/ or core/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import AuthFailure, TokenClaims
from auth.tokens import TokenIssuer

_BEARER_PREFIX = "bearer "


def _bearer_token(request: Request) -> str | None:
    # Scheme is case-insensitive per RFC 7235.
    auth_header = request.headers.get("Authorization", "")
    if auth_header[: len(_BEARER_PREFIX)].lower() != _BEARER_PREFIX:
        return None
    token = auth_header[len(_BEARER_PREFIX) :].strip()
    return token or None


def try_get_current_claims(request: Request) -> TokenClaims | None:
    """Verify the request's bearer token. Returns the claims, or None on any failure."""
    token = _bearer_token(request)
    if token is None:
        return None
    issuer: TokenIssuer = request.app.state.token_issuer
    return issuer.verify(token)


def get_current_claims(request: Request) -> TokenClaims:
    """Require a valid bearer token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(claims: TokenClaims = Depends(get_current_claims)): ...
    """
    claims = try_get_current_claims(request)
    if claims is None:
        raise HTTPException(
            status_code=401,
            detail={"code": AuthFailure.INVALID_TOKEN.value, "message": AuthFailure.INVALID_TOKEN.message},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims
