"""Configuration using Pydantic Settings.

Configuration is environment-aware:
- RATE_GUARD_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file in the working directory
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
RATE_GUARD_ENV = os.getenv("RATE_GUARD_ENV", "development")

# Map environments to their respective .env files (relative to the working directory)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(RATE_GUARD_ENV, ".env.development")
_env_path = Path.cwd() / _env_filename

# Only load from file if it exists (deployments might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=False)


def _build_limiter_settings() -> "LimiterSettings":
    """Build limiter settings from environment."""

    return LimiterSettings()


def _build_store_settings() -> "StoreSettings":
    """Build store settings from environment."""

    return StoreSettings()


def _build_log_settings() -> "LogSettings":
    """Build log settings from environment."""

    return LogSettings()


class LimiterSettings(BaseSettings):
    """Decision engine tuning.

    Thresholds are remaining-request counts; waits and buffers are seconds.
    """

    key_prefix: str = Field(
        "httpx:rate_limit",
        description="Coordination key shared by every process using the same limit",
    )
    low_threshold: int = Field(
        2,
        description="Remaining count at or below which preemptive delays start",
        ge=0,
    )
    medium_threshold: int = Field(
        5,
        description="Remaining count at or below which the mildest delay tier applies",
        ge=0,
    )
    max_wait_seconds: float = Field(
        90,
        description="Hard ceiling for any single wait, and default window without Retry-After",
        gt=0,
    )
    max_progressive_wait_high: float = Field(
        30,
        description="Ceiling for the delay when remaining <= low_threshold",
        ge=0,
    )
    max_progressive_wait_low: float = Field(
        10,
        description="Ceiling for the delay when remaining <= medium_threshold",
        ge=0,
    )
    max_window_seconds: float = Field(
        86_400,
        description="Ceiling for a Retry-After window reported by the server",
        gt=0,
    )
    cache_ttl_buffer: float = Field(
        10,
        description="Extra store lifetime beyond the reset time",
        ge=0,
    )
    remaining_header: str = Field(
        "X-RateLimit-Remaining",
        description="Response header carrying the remaining quota",
    )
    retry_after_header: str = Field(
        "Retry-After",
        description="Response header carrying the wait window",
    )
    too_many_requests_status: int = Field(
        429,
        description="HTTP status signalling the limit was exceeded",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_GUARD_LIMITER_",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def _check_thresholds(self) -> "LimiterSettings":
        if self.low_threshold > self.medium_threshold:
            raise ValueError("low_threshold must be <= medium_threshold")
        return self


class StoreSettings(BaseSettings):
    """Store backend selection.

    Supports memory (per process), file (shared directory) and redis.
    Validation of backend-specific requirements happens in the factory.
    """

    backend: str = Field(
        "memory",
        description="Store backend name (memory, file, redis)",
    )
    file_directory: str | None = Field(
        None,
        description="Directory for the file backend",
    )
    redis_url: str | None = Field(
        None,
        description="Connection URL for the redis backend",
    )
    redis_prefix: str = Field(
        "rate_guard",
        description="Namespace for keys written by the redis backend",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_GUARD_STORE_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log destination: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        0,
        description="Rotate the log file at this size (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(3, description="Rotated files to keep", ge=0)

    model_config = SettingsConfigDict(
        env_prefix="RATE_GUARD_LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main settings container.

    Automatically loads from the appropriate .env.{RATE_GUARD_ENV} file.

    Environments:
    - development: Local development
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    rate_guard_env: str = RATE_GUARD_ENV
    limiter: LimiterSettings = Field(default_factory=_build_limiter_settings)
    store: StoreSettings = Field(default_factory=_build_store_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
