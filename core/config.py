"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Todoboard happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. auth_jwt_secret -> AUTH_JWT_SECRET). Type coercion and validation
      are built in.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved from environment. Dev mode generates a JWT secret with a
      warning; production mode refuses to start without one.

Security notes:
  AUTH_JWT_SECRET must be the same HS256 secret the auth provider signs its
  access tokens with. A secret shorter than 32 chars is rejected outright.

Layer rule: core/ is the kernel. This module may not import from api/, web/,
auth/, or todos/.
"""

import logging
import secrets
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("todoboard.config")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file. The model_validator enforces
    production-safety rules at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False

    # ------------------------------------------------------------------
    # Auth provider (GoTrue-compatible REST API)
    # ------------------------------------------------------------------

    # Empty URL means the provider is not configured; every auth call then
    # fails with a 503-style AuthProviderError instead of a network error.
    auth_provider_url: str = ""
    auth_provider_key: str = ""
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev secret or raises, so callers never see "".
    auth_jwt_secret: str = ""
    auth_jwt_audience: str = "authenticated"
    auth_timeout_seconds: float = 10.0

    # ------------------------------------------------------------------
    # Session cookies
    # ------------------------------------------------------------------

    secure_cookies: bool = False
    refresh_token_max_age: int = 7 * 24 * 3600

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    signin_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # Todo store
    # ------------------------------------------------------------------

    # Simulated latency of the in-memory store, in seconds.
    todo_delay_seconds: float = 0.1

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_jwt_secret(self) -> "Settings":
        """Enforce the AUTH_JWT_SECRET policy.

        Dev mode (DEBUG=true): auto-generate a random secret with a warning.
            Tokens issued by a real provider will not verify -- acceptable for
            local work against a stubbed provider.

        Production mode (DEBUG=false or not set): refuse to start if the
            secret is missing. Without it no session cookie can be verified
            and every protected page would silently bounce to /signin.

        Both modes: reject secrets shorter than 32 characters.
        """
        if not self.auth_jwt_secret:
            if self.debug:
                self.auth_jwt_secret = secrets.token_hex(32)
                logger.warning(
                    "WARNING: Using auto-generated AUTH_JWT_SECRET. "
                    "Provider-issued session tokens will not verify."
                )
            else:
                raise ValueError(
                    "AUTH_JWT_SECRET is required in production mode. "
                    "Set AUTH_JWT_SECRET in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.auth_jwt_secret) < 32:
            raise ValueError("AUTH_JWT_SECRET must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
