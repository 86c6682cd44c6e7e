"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for MedAI happen here. No module should call
os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. jwt_secret -> JWT_SECRET). Type coercion and validation are built in.

Session mode:
  JWT_SECRET selects the session strategy for the whole process. When it is
  set the server runs in token mode (signed JWT in an httpOnly cookie); when
  it is empty the server runs in cookie mode (plain user_email cookie). The
  choice is made once in the API lifespan and never re-read per request.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
analysis/, or client/.
"""

import logging
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("medai.config")

DEFAULT_API_URL = "https://medai-glsh.onrender.com"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
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
    database_url: str = ""  # empty = SQLite file next to the store module

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "cookie mode".
    jwt_secret: str = ""
    token_expire_seconds: int = 7 * 24 * 60 * 60

    # ------------------------------------------------------------------
    # HTTP surface
    # ------------------------------------------------------------------

    cors_origins: list[str] = [
        "https://cnd-project-frontend.onrender.com",
        "http://localhost:3000",
    ]
    allowed_hosts: list[str] = ["*"]
    login_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # Client
    # ------------------------------------------------------------------

    api_url: str = Field(default="", validation_alias="MEDAI_API_URL")

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def normalize_values(self) -> "Settings":
        """Strip stray whitespace from secrets and URLs copied out of dashboards.

        A whitespace-only JWT_SECRET counts as unset (cookie mode). Short
        secrets are accepted but logged: HS256 signing relies on key entropy.
        """
        self.jwt_secret = self.jwt_secret.strip()
        self.api_url = self.api_url.strip()
        if self.jwt_secret and len(self.jwt_secret) < 32:
            logger.warning("JWT_SECRET is shorter than 32 characters; tokens are easier to forge.")
        return self

    @property
    def use_jwt(self) -> bool:
        return bool(self.jwt_secret)

    @property
    def resolved_api_url(self) -> str:
        return self.api_url or DEFAULT_API_URL


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
