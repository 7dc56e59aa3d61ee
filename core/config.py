"""
core/config.py -- ClubSite settings, read from the environment by pydantic-settings.

get_settings() is the single entry point: nothing else in the project reads
os.environ. Each field maps to the upper-cased env var of the same name
(token_expire_seconds -> TOKEN_EXPIRE_SECONDS); a .env file in the working
directory is read too. The first call builds Settings and caches it.

Startup policy, enforced by the validators below:
  [S1] No built-in signing secret. Without SECRET_KEY the process only starts
       with DEBUG=true, and then signs with a random per-process key.

  [S2] A SECRET_KEY under 32 characters is refused in every mode.

  [S3] No built-in superadmin password. Without SUPERADMIN_PASSWORD the
       process only starts with DEBUG=true; auth.bootstrap then generates
       one and logs it once when it creates the account.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/ or content/.
"""

import logging
import secrets
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("clubsite.config")


class Settings(BaseSettings):
    """Every tunable of the service. Defaults suit local development.

    Keyword arguments override the environment, which is how tests build
    one-off instances without touching os.environ.
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

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # 8 hours. 0 issues tokens without an exp claim (never expire).
    token_expire_seconds: int = Field(default=8 * 3600, ge=0)
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)
    temp_password_length: int = Field(default=16, ge=12, le=64)

    superadmin_email: str = "superadmin@example.com"
    superadmin_password: str = ""

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    database_url: str = "sqlite:///clubsite.db"
    db_pool_size: int = Field(default=10, ge=1)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    upload_dir: str = "uploads"
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, ge=1)

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """[S1][S2]: fill in a random key under DEBUG, otherwise require one of 32+ chars."""
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Tokens will not survive a restart.")
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
    def validate_superadmin_password(self) -> "Settings":
        """Enforce the SUPERADMIN_PASSWORD policy [S3].

        An empty value is only allowed in dev mode; auth.bootstrap generates
        the password in that case.
        """
        if not self.superadmin_password and not self.debug:
            raise ValueError(
                "SUPERADMIN_PASSWORD is required in production mode. "
                "Set SUPERADMIN_PASSWORD in your environment or .env file."
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings (built on first call).

    Tests that change env vars after import must call get_settings.cache_clear().
    """
    return Settings()
