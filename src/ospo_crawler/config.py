"""Configuration settings for the OSPO crawler fetch layer."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FetchConfig(BaseModel):
    """Defaults for the paginated retrying fetcher.

    Delays are expressed in milliseconds, the unit recorded in the
    per-page activity log.
    """

    retry_delay_ms: int = Field(
        default=1000,
        ge=0,
        description="Milliseconds to wait before retrying a 5xx or network failure",
    )
    forbidden_delay_ms: int = Field(
        default=3 * 60 * 1000,
        ge=0,
        description="Milliseconds to wait after a 403 before trying again",
    )
    max_attempts: int = Field(
        default=5,
        ge=1,
        description="Maximum attempts per page, across all retry kinds",
    )
    per_page: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Page size requested when following paginated resources",
    )
    user_agent: str = Field(
        default="ospo-crawler",
        description="User-Agent header sent with every request",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Transport timeout for a single HTTP attempt",
    )


class RateLimitConfig(BaseModel):
    """Configuration for passive rate limit tracking.

    Controls thresholds for health status determination.
    """

    healthy_threshold_pct: float = Field(
        default=50.0,
        ge=0.0,
        le=100.0,
        description="% remaining above which status is HEALTHY",
    )
    warning_threshold_pct: float = Field(
        default=20.0,
        ge=0.0,
        le=100.0,
        description="% remaining above which status is WARNING (below healthy)",
    )
    critical_threshold_pct: float = Field(
        default=5.0,
        ge=0.0,
        le=100.0,
        description="% remaining above which status is CRITICAL (below warning)",
    )
    min_remaining_buffer: int = Field(
        default=50,
        ge=0,
        description="Reserve buffer of requests to keep available",
    )
    track_from_headers: bool = Field(
        default=True,
        description="Passively track limits from response headers",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Nested sections can be overridden with a double underscore,
    e.g. ``FETCH__MAX_ATTEMPTS=3``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # GitHub API
    # --------------------------------------------------------------------------
    github_token: str = Field(
        default="",
        description="GitHub personal access token",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Fetching & Rate Limiting
    # --------------------------------------------------------------------------
    fetch: FetchConfig = Field(
        default_factory=FetchConfig,
        description="Fetcher retry and paging defaults",
    )
    rate_limit: RateLimitConfig = Field(
        default_factory=RateLimitConfig,
        description="Rate limit tracking configuration",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
