"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the College Tours API happen here. No module
should call os.getenv() or os.environ.get() directly -- import get_settings()
or accept a Settings instance instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. asgi.py
      uses it to build the production app.

  Injection: api.main.create_app(settings) hands the same Settings object to
      TokenService, BearerAuth and AdminGate. Nothing reads module-level
      secrets, so tests build isolated apps with their own Settings.

  @model_validator(mode="after"): cross-field validation once every field is
      resolved from the environment.

Security notes:
  SECRET_KEY shorter than 32 chars is rejected outright. JWT signing relies on
  key entropy -- a short key weakens every issued token.

  In production mode (DEBUG not set or false), a missing SECRET_KEY is a hard
  startup failure. There is no fallback signing secret.

  AUTH_DEV_BYPASS substitutes a synthetic identity for requests without a
  token. It is refused unless DEBUG=true.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or tours/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("collegetours.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'collegetours.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults except the policy-checked secret_key, so
    Settings(debug=True) is enough for a throwaway development instance.

    Environment variable name mapping: field names are uppercased automatically.
    E.g. `secret_key` reads from SECRET_KEY, `admin_emails` from ADMIN_EMAILS
    (a JSON list, e.g. ADMIN_EMAILS='["dean@uni.edu"]').
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
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_expire_seconds: int = 24 * 60 * 60
    admin_emails: list[str] = []
    auth_dev_bypass: bool = False

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["*"]
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost"]

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    # Applies to /auth/register and /auth/login (10/minute per client IP).
    rate_limit_enabled: bool = True

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if
            SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("WARNING: Using auto-generated SECRET_KEY. Tokens will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self

    @model_validator(mode="after")
    def validate_dev_bypass(self) -> "Settings":
        """Refuse the unauthenticated dev identity outside of debug mode."""
        if self.auth_dev_bypass:
            if not self.debug:
                raise ValueError("AUTH_DEV_BYPASS requires DEBUG=true.")
            logger.warning("WARNING: AUTH_DEV_BYPASS is on. Requests without a token act as 'dev-user'.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: construct Settings(...) directly and pass it to create_app(),
    or call get_settings.cache_clear() after changing the environment.
    """
    return Settings()
