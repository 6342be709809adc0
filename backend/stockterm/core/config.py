"""
Engine Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "StockTerm Indicator Engine"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # Logging
    log_level: str = "INFO"

    # Per-indicator result cache
    indicator_cache_enabled: bool = True
    indicator_cache_max_size: int = Field(default=50, ge=1)
    indicator_cache_max_age_seconds: float = Field(default=300.0, gt=0)

    # Calendar used for anchored calculations (VWAP resets)
    market_timezone: str = "UTC"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
