"""
auth/store.py -- SQLAlchemy Core persistence layer for identities.

Pattern: Repository + Data Mapper. IdentityStore is the repository;
_row_to_identity is the mapper. Service and route code never touch SQL.

CredentialStore is the narrow interface the auth service consumes: exactly
create_identity() and find_by_email(). Anything satisfying it (a different
database, a test double) can stand in for IdentityStore.

Uniqueness:
  Email uniqueness is enforced by the UNIQUE constraint on identities.email,
  and create_identity() is a single INSERT -- there is no SELECT-then-INSERT
  window in which two concurrent registrations could both pass. The losing
  INSERT raises IntegrityError, which is translated into a DuplicateIdentity
  value. Any other database error propagates unmodified.

Security:
  All queries use bound parameters. No f-strings in SQL.

DB path: auth/bookmarks_auth.db by default (see core.config.Settings.database_url).

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import DuplicateIdentity, Identity

logger = logging.getLogger("bookmarks.auth.store")

# SQLSTATE for unique_violation (PostgreSQL, and any DBAPI that exposes it).
_UNIQUE_VIOLATION_SQLSTATE = "23505"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_identities = Table(
    "identities",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------


class CredentialStore(Protocol):
    """Persistence operations the auth service depends on. Nothing else."""

    def create_identity(self, email: str, password_hash: str) -> Identity | DuplicateIdentity: ...

    def find_by_email(self, email: str) -> Identity | None: ...


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_unique_violation(exc: IntegrityError) -> bool:
    """Return True if the IntegrityError came from a UNIQUE constraint.

    SQLite reports "UNIQUE constraint failed: ..."; PostgreSQL drivers expose
    SQLSTATE 23505 as pgcode (psycopg2) or sqlstate (psycopg 3, asyncpg).
    NOT NULL or foreign key failures are not duplicates and must propagate.
    """
    orig = exc.orig
    for attr in ("sqlstate", "pgcode"):
        if getattr(orig, attr, None) == _UNIQUE_VIOLATION_SQLSTATE:
            return True
    message = str(orig).lower()
    return "unique constraint" in message or "duplicate key" in message


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class IdentityStore:
    """SQLAlchemy-backed CredentialStore.

    Usage:
        store = IdentityStore("sqlite:///:memory:")
        created = store.create_identity("a@x.com", hasher.hash("secret1"))
        found = store.find_by_email("a@x.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def create_identity(self, email: str, password_hash: str) -> Identity | DuplicateIdentity:
        """Insert a new identity and return it, or DuplicateIdentity if the email is taken.

        The UNIQUE constraint decides; there is no prior existence check.
        """
        created_at = _now_iso()
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _identities.insert().values(
                        email=email,
                        password_hash=password_hash,
                        created_at=created_at,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                return DuplicateIdentity(email=email)
            raise
        identity_id = result.inserted_primary_key[0]
        logger.info("Identity created (id=%d)", identity_id)
        return Identity(id=identity_id, email=email, password_hash=password_hash, created_at=created_at)

    def find_by_email(self, email: str) -> Identity | None:
        """Look up an identity by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_identities.select().where(_identities.c.email == email)).fetchone()
        return _row_to_identity(row) if row is not None else None

    def ping(self) -> bool:
        """Return True if the database answers a trivial query. Used by /health."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception:
            logger.exception("Database health check failed")
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_identity(row) -> Identity:
    return Identity(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        created_at=row.created_at,
    )
