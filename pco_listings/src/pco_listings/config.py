"""
Configuration management using Pydantic Settings.

All configuration is loaded from environment variables with sensible defaults.
Planning Center credentials default to empty; a listing request made without
them fails at fetch time rather than at startup.
"""

from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Planning Center API credentials (personal access token pair)
    pco_app_id: str = Field("", description="Planning Center application ID")
    pco_app_secret: str = Field("", description="Planning Center application secret")
    request_timeout: float = Field(15.0, description="Timeout for Planning Center requests (seconds)")

    # Listings
    default_limit: int = Field(5, description="Items per listing when no limit is given")
    date_format: str = Field("%B %-d, %Y", description="strftime format for event dates (%-d, %-m unpadded)")

    # Cache
    cache_ttl_seconds: int = Field(3600, description="How long rendered listings are cached")
    database_url: Optional[str] = Field(None, description="SQLAlchemy URL for the cache (leave empty for in-memory)")

    # Server
    port: int = Field(8000, description="HTTP server port")

    # Logging
    log_level: str = Field("INFO", description="Log level")
    log_json: bool = Field(False, description="Output logs as JSON")

    @field_validator("cache_ttl_seconds", "default_limit")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        """Reject zero or negative TTLs and limits."""
        if v < 1:
            raise ValueError(f"must be at least 1, got {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def has_credentials(self) -> bool:
        """Check if both Planning Center credentials are configured."""
        return bool(self.pco_app_id and self.pco_app_secret)

    @property
    def masked_secret(self) -> str:
        """Get the application secret with all but the last 4 chars hidden."""
        secret = self.pco_app_secret
        if not secret:
            return ""
        if len(secret) <= 4:
            return "*" * len(secret)
        return "*" * (len(secret) - 4) + secret[-4:]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Clear cache to allow re-reading settings (useful for tests)
def clear_settings_cache():
    """Clear the settings cache."""
    get_settings.cache_clear()
