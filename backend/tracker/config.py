# backend/tracker/config.py
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- LOG_LEVEL / LOG_FORMAT: Logging setup
- PRICE_LOOKBACK_DAYS / FX_*: Market data window sizes
- FETCH_THROTTLE_SECONDS: Delay between sequential upstream requests
- RATE_LIMIT_ENABLED: Per-client request limits

Environment-specific behavior:
- test: Throttling and rate limiting are disabled so tests never sleep
- development: Defaults suitable for local use
- production: Rejects a zero throttle (upstream providers rate-limit hard)

Usage:
    from tracker.config import settings

    if settings.is_test:
        ...
"""
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Find the .env file in project root (parent of backend/)
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - APP_NAME: Application name (default: "Portfolio Time Machine")
        - DEBUG: Enable debug mode (default: False)
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")

    Market Data Settings (optional, with sensible defaults):
        - PRICE_LOOKBACK_DAYS: History fetched per asset (default: 365)
        - FX_WINDOW_PADDING_DAYS: Extra days fetched before an FX range (default: 30)
        - FX_FALLBACK_DAYS: Lookback for the single-rate FX fallback (default: 7)
        - FETCH_THROTTLE_SECONDS: Pause between upstream requests (default: 1.1)
        - PROVIDER_TIMEOUT_SECONDS: Upstream request timeout (default: 10)
        - SERIES_CACHE_TTL_SECONDS: Lifetime of cached series (default: 3600)
        - SERIES_CACHE_MAX_SIZE: Maximum cached series (default: 512)
        - RATE_LIMIT_ENABLED: Apply per-client request limits (default: True)
    """

    # Environment mode - determines validation strictness
    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format"
    )

    # Optional - safe defaults
    app_name: str = "Portfolio Time Machine"
    debug: bool = False

    # =========================================================================
    # REPORTING
    # =========================================================================
    reporting_currency: Literal["TWD"] = Field(
        default="TWD",
        description="Currency every valuation is expressed in"
    )

    # =========================================================================
    # MARKET DATA
    # =========================================================================
    price_lookback_days: int = Field(
        default=365,
        ge=1,
        le=3650,
        description="Days of daily closes fetched per asset"
    )
    fx_window_padding_days: int = Field(
        default=30,
        ge=0,
        le=365,
        description="Days fetched before the FX range start so early dates resolve"
    )
    fx_fallback_days: int = Field(
        default=7,
        ge=1,
        le=60,
        description="Lookback used when the padded FX window returns no data"
    )
    fetch_throttle_seconds: float = Field(
        default=1.1,
        ge=0,
        le=60,
        description="Pause between sequential upstream price requests"
    )
    provider_timeout_seconds: int = Field(
        default=10,
        ge=1,
        le=120,
        description="Timeout for upstream provider requests"
    )

    # =========================================================================
    # SERIES CACHE
    # =========================================================================
    series_cache_ttl_seconds: int = Field(
        default=3600,
        ge=0,
        description="Seconds a fetched price/FX series stays cached"
    )
    series_cache_max_size: int = Field(
        default=512,
        ge=1,
        description="Maximum number of cached series"
    )

    # =========================================================================
    # RATE LIMITING
    # =========================================================================
    rate_limit_enabled: bool = Field(
        default=True,
        description="Apply per-client request limits (slowapi)"
    )

    # =========================================================================
    # CORS
    # =========================================================================
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed CORS origins (comma-separated in env var)"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_environment_config(self) -> "Settings":
        """
        Validate settings based on environment.

        Rules:
        - test: throttling and rate limiting disabled (tests must never sleep)
        - production: throttle must be non-zero
        """
        if self.environment == "test":
            object.__setattr__(self, "fetch_throttle_seconds", 0.0)
            object.__setattr__(self, "rate_limit_enabled", False)
            return self

        if self.environment == "production" and self.fetch_throttle_seconds == 0:
            raise ValueError(
                "FETCH_THROTTLE_SECONDS must be greater than zero in production. "
                "Upstream price providers rate-limit unthrottled clients."
            )

        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


# Create single instance
settings = Settings()
