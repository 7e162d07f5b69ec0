"""
auth/service.py -- Registration and login orchestration.

AuthService ties the three auth components together:
  register: hash password -> atomic insert -> issue token
  login:    find by email -> verify password -> issue token

Outcomes are values, not exceptions. Business failures come back as
AuthResult(failure=...); the route layer maps them to HTTP responses.
Infrastructure failures (database down, hashing error, signing error) are
not caught here and propagate to the caller unmodified.

Security:
  [C1] Unknown email and wrong password return the same AuthFailure and cost
       the same Argon2 work, so neither response body nor response time
       reveals whether an account exists.
  Logs carry identity ids and failure kinds only -- never the password, the
  hash, or the token.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging

from auth.models import AuthFailure, AuthResult, CredentialPair, DuplicateIdentity
from auth.passwords import PasswordHasher
from auth.store import CredentialStore
from auth.tokens import TokenIssuer

logger = logging.getLogger("bookmarks.auth")


class AuthService:
    """Stateless coordinator for register and login.

    Holds references to its collaborators only; no per-call state survives a
    call, so one instance safely serves concurrent requests.
    """

    def __init__(self, hasher: PasswordHasher, store: CredentialStore, issuer: TokenIssuer) -> None:
        self.hasher = hasher
        self.store = store
        self.issuer = issuer

    def register(self, email: str, password: str) -> AuthResult:
        """Create an identity for (email, password) and return a token for it.

        Returns CREDENTIALS_TAKEN if the email is already registered. Any
        other store error propagates.
        """
        creds = CredentialPair(email=email, password=password)
        password_hash = self.hasher.hash(creds.password)
        created = self.store.create_identity(creds.email, password_hash)
        if isinstance(created, DuplicateIdentity):
            logger.info("Registration rejected: %s", AuthFailure.CREDENTIALS_TAKEN.value)
            return AuthResult.fail(AuthFailure.CREDENTIALS_TAKEN)
        logger.info("Registration succeeded (id=%d)", created.id)
        return AuthResult.success(self.issuer.issue(created.id, created.email))

    def login(self, email: str, password: str) -> AuthResult:
        """Verify (email, password) and return a token for the matching identity."""
        creds = CredentialPair(email=email, password=password)
        identity = self.store.find_by_email(creds.email)
        if identity is None:
            # Equalize timing -- do NOT return before running Argon2 [C1]
            self.hasher.burn(creds.password)
            logger.info("Login rejected: %s", AuthFailure.CREDENTIALS_INCORRECT.value)
            return AuthResult.fail(AuthFailure.CREDENTIALS_INCORRECT)
        if not self.hasher.verify(identity.password_hash, creds.password):
            logger.info("Login rejected: %s", AuthFailure.CREDENTIALS_INCORRECT.value)
            return AuthResult.fail(AuthFailure.CREDENTIALS_INCORRECT)
        logger.info("Login succeeded (id=%d)", identity.id)
        return AuthResult.success(self.issuer.issue(identity.id, identity.email))
