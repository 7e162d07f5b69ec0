"""
api/routes/v1/auth.py -- Registration, login, and token introspection endpoints.

Routes:
  POST /api/v1/auth/register   -- create identity; 201 + bearer token
  POST /api/v1/auth/login      -- verify credentials; 200 + bearer token
  GET  /api/v1/auth/me         -- claims of the presented bearer token (requires auth)

Security:
  [C1] Login failures for unknown email and wrong password share one error
       code ("credentials_incorrect") and one status code.
  [M5] Cache-Control: no-store on every response that carries a token.
  register/login are sync def routes on purpose: Argon2 is CPU-bound, and
  FastAPI runs sync routes in its worker thread pool instead of blocking
  the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.models import CredentialsRequest, ErrorDetail, MeResponse, TokenResponse
from auth.dependencies import get_current_claims
from auth.models import AuthFailure, AuthResult, TokenClaims
from auth.service import AuthService

# Both business failures surface as 403 Forbidden, the status existing
# clients of this API already handle.
_FAILURE_STATUS = {
    AuthFailure.CREDENTIALS_TAKEN: 403,
    AuthFailure.CREDENTIALS_INCORRECT: 403,
}

# Auth policy:
# - POST /api/v1/auth/register:  public
# - POST /api/v1/auth/login:     public
# - GET  /api/v1/auth/me:        requires bearer token (get_current_claims)
router = APIRouter()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/register", response_model=TokenResponse, status_code=201)
def register(request: Request, body: CredentialsRequest) -> JSONResponse:
    """Register a new identity and return a bearer token for it.

    Returns 403 credentials_taken if the email is already registered.
    """
    service: AuthService = request.app.state.auth_service
    result = service.register(body.email, body.password)
    return _token_response(request, result, status_code=201)


@router.post("/auth/login", response_model=TokenResponse)
def login(request: Request, body: CredentialsRequest) -> JSONResponse:
    """Authenticate with email and password; return a bearer token.

    Returns the same generic error for unknown email and wrong password
    ("credentials_incorrect") to avoid leaking account existence.
    """
    service: AuthService = request.app.state.auth_service
    result = service.login(body.email, body.password)
    return _token_response(request, result, status_code=200)


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=MeResponse)
async def me(claims: TokenClaims = Depends(get_current_claims)) -> MeResponse:
    """Return the identity carried by the presented bearer token."""
    return MeResponse(user_id=claims.subject, email=claims.email, expires_at=claims.expires_at)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _token_response(request: Request, result: AuthResult, status_code: int) -> JSONResponse:
    """Map an AuthResult onto the HTTP contract.

    Failures become HTTPException so the app-wide handler renders the
    standard error envelope.
    """
    if not result.ok:
        raise HTTPException(
            status_code=_FAILURE_STATUS[result.failure],
            detail=ErrorDetail(code=result.failure.value, message=result.failure.message).model_dump(),
            headers={"Cache-Control": "no-store"},  # [M5]
        )
    service: AuthService = request.app.state.auth_service
    resp = JSONResponse(
        status_code=status_code,
        content=TokenResponse(
            access_token=result.token,
            expires_in=service.issuer.expire_seconds,
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp
