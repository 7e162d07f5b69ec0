"""
tests/conftest.py -- Shared test fixtures for the bookmarks auth test suite.

This module provides:
  - hasher / issuer / store / service: unit-level components with cheap
    Argon2 parameters and an in-memory SQLite store
  - _make_test_store(): isolated named shared-memory DB for API tests
  - _patch_lifespan(): wires test components into app.state, bypassing real startup
  - api_client: TestClient against the real FastAPI app

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
for API tests because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread.

JWT_SECRET must be set before any core/auth import that calls get_settings().
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before importing the app so Settings() validates.
os.environ.setdefault("JWT_SECRET", "test-secret-0123456789abcdef0123456789abcdef")
# Cheap Argon2 parameters keep the suite fast; production uses the defaults.
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("ARGON2_PARALLELISM", "1")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.store import IdentityStore
from auth.tokens import TokenIssuer

TEST_SECRET = os.environ["JWT_SECRET"]


# ---------------------------------------------------------------------------
# Unit-level component fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET)


@pytest.fixture
def store() -> Generator[IdentityStore, None, None]:
    s = IdentityStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def service(hasher: PasswordHasher, store: IdentityStore, issuer: TokenIssuer) -> AuthService:
    return AuthService(hasher=hasher, store=store, issuer=issuer)


# ---------------------------------------------------------------------------
# API helpers
# ---------------------------------------------------------------------------


def _make_test_store(db_suffix: str) -> IdentityStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    return IdentityStore(f"sqlite:///file:test_auth_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(user_store: IdentityStore):
    """Return an async context manager that replaces the real lifespan.

    Wires the test store and cheap-hash components into app.state so
    TestClient routes see an isolated DB rather than the on-disk one.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        issuer = TokenIssuer(TEST_SECRET)
        app.state.identity_store = user_store
        app.state.token_issuer = issuer
        app.state.auth_service = AuthService(
            hasher=PasswordHasher(time_cost=1, memory_cost=1024, parallelism=1),
            store=user_store,
            issuer=issuer,
        )
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[TestClient, None, None]:
    """Yield a TestClient for the real FastAPI app with a patched lifespan.

    Each test module gets its own database, named after the module.
    """
    user_store = _make_test_store(request.module.__name__.rsplit(".", 1)[-1])
    original_lifespan = app.router.lifespan_context
    app.router.lifespan_context = _patch_lifespan(user_store)

    with TestClient(app, raise_server_exceptions=False) as client:
        yield client

    app.router.lifespan_context = original_lifespan
    user_store.close()
