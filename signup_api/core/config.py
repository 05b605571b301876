"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

Provider and rate-limit store credentials are optional on purpose: the
service starts without them and degrades (no rate limiting, or a generic
configuration error on submit) instead of refusing to boot.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file and os.getenv("TESTING") != "true":
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


FORM_ID_PATTERN = re.compile(r"^\d+$")

RATE_LIMIT_BACKENDS = {"auto", "upstash", "memory", "none"}


class AppSettings(BaseSettings):
    """HTTP surface configuration for the signup endpoint."""

    subscribe_path: str = Field(
        "/api/subscribe",
        description="Path of the subscription endpoint (also the rate-limited path)",
    )
    success_redirect_url: str = Field(
        "/?subscribed=1",
        description="Redirect target for successful native form posts",
    )
    error_redirect_url: str = Field(
        "/?subscribe_error=1",
        description="Redirect target for failed native form posts",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class ProviderSettings(BaseSettings):
    """Mailing-list provider (ConvertKit v3) configuration."""

    api_key: str | None = Field(
        None,
        description="ConvertKit API key, sent as a body field on subscribe",
    )
    form_id: str | None = Field(
        None,
        description="Numeric ConvertKit form id the subscriber is added to",
    )
    base_url: str = Field(
        "https://api.convertkit.com/v3",
        description="ConvertKit API root",
    )
    timeout_seconds: float | None = Field(
        None,
        description="Optional request timeout override (httpx default when unset)",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="CONVERTKIT_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Sliding-window rate limit configuration."""

    backend: str = Field(
        "auto",
        description="auto | upstash | memory | none",
    )
    requests: int = Field(
        5,
        description="Maximum admitted requests per key per window",
        ge=1,
    )
    window_seconds: int = Field(
        60,
        description="Sliding window size in seconds",
        ge=1,
    )
    key_prefix: str = Field(
        "ratelimit:subscribe",
        description="Namespace prepended to store keys",
    )
    upstash_url: str | None = Field(
        None,
        validation_alias="UPSTASH_REDIS_REST_URL",
        description="Upstash Redis REST endpoint",
    )
    upstash_token: str | None = Field(
        None,
        validation_alias="UPSTASH_REDIS_REST_TOKEN",
        description="Upstash Redis REST bearer token",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
        populate_by_name=True,
    )

    @field_validator("backend")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in RATE_LIMIT_BACKENDS:
            raise ValueError(
                f"backend must be one of {sorted(RATE_LIMIT_BACKENDS)}, got '{value}'"
            )
        return value

    @property
    def store_configured(self) -> bool:
        return bool(self.upstash_url and self.upstash_token)


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="json | plain")
    output: str = Field("stdout", description="stdout | file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        0,
        description="Rotate the log file at this size (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and echo the correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
