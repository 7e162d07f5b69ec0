"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the bookmarks auth service happen here.
No module should call os.getenv() or os.environ.get() directly -- import
get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. jwt_secret -> JWT_SECRET). Type coercion and validation are built in.

  frozen=True: a Settings instance is an immutable value. Components receive
      the values they need at construction time (TokenIssuer gets the secret,
      PasswordHasher gets the cost parameters) rather than reading module
      globals.

Security notes:
  [S1] JWT_SECRET is a SecretStr so it never appears in repr(), logs, or
       tracebacks. Only TokenIssuer unwraps it.

  [S2] A missing JWT_SECRET is a hard startup failure. There is no dev-mode
       fallback: the service must never sign tokens with a random or empty key.

  [S3] JWT_SECRET shorter than 32 chars is rejected. HS256 security rests on
       key entropy -- a short key makes offline brute force of the signature
       practical.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("bookmarks.config")

# Tokens live 20 hours from issuance.
TOKEN_TTL_SECONDS = 20 * 60 * 60

MIN_SECRET_LENGTH = 32

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'auth' / 'bookmarks_auth.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Every field except jwt_secret has a working default. jwt_secret defaults
    to the empty sentinel so the validator below can raise a readable error
    instead of pydantic's generic "field required".
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    jwt_secret: SecretStr = SecretStr("")
    token_expire_seconds: int = TOKEN_TTL_SECONDS

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Password hashing (Argon2id). Defaults match argon2-cffi's
    # RFC 9106 low-memory profile: 3 passes over 64 MiB with 4 lanes.
    # ------------------------------------------------------------------

    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536  # KiB
    argon2_parallelism: int = 4

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_jwt_secret(self) -> "Settings":
        """Refuse to start without a usable signing secret [S2][S3]."""
        secret = self.jwt_secret.get_secret_value()
        if not secret:
            raise ValueError(
                "JWT_SECRET is required. "
                "Set JWT_SECRET in your environment or .env file."
            )
        if len(secret) < MIN_SECRET_LENGTH:
            raise ValueError(f"JWT_SECRET must be at least {MIN_SECRET_LENGTH} characters.")
        return self

    @model_validator(mode="after")
    def validate_token_ttl(self) -> "Settings":
        if self.token_expire_seconds <= 0:
            raise ValueError("TOKEN_EXPIRE_SECONDS must be positive.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    Uses lru_cache so Settings() is instantiated exactly once -- at first call.
    The API lifespan calls this at startup, so a missing JWT_SECRET stops the
    process before it accepts a single request.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    settings = Settings()
    # Only the URL scheme is logged; a full URL may embed DB credentials.
    logger.info("Settings loaded (database=%s)", settings.database_url.split(":", 1)[0])
    return settings
