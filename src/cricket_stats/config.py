"""Configuration management for the cricket stats tracker."""

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Load environment from .env if present
load_dotenv(override=False)


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    url: str = Field(default="sqlite:///cricket_stats.db", validation_alias="DATABASE_URL")
    echo: bool = Field(default=False, validation_alias="DB_ECHO")


class AnalyticsSettings(BaseSettings):
    """Aggregation engine settings."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    # "balls": overs are converted to balls before any arithmetic.
    # "legacy": packed overs (4.3) are summed and divided as plain decimals.
    overs_arithmetic: Literal["balls", "legacy"] = Field(default="balls", validation_alias="OVERS_ARITHMETIC")
    conversion_start_runs: int = Field(default=10, ge=1, validation_alias="CONVERSION_START_RUNS")


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    file: Optional[str] = Field(default=None, validation_alias="LOG_FILE")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings loaded from environment."""
    return Settings()


# Global settings instance
settings = get_settings()
