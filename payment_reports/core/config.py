"""Core application configuration and settings.

Handles environment variables, the reporting timezone, and data source paths.
"""
import logging
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings


# Load environment variables
ROOT = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=ROOT / ".env", override=True)
load_dotenv(override=True)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Settings
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    # Reporting
    timezone: str = Field(default="UTC", alias="TIMEZONE")
    currency: str = Field(default="PLN", alias="CURRENCY")

    # Data source
    payments_csv_path: str = Field(default="data/payments.csv", alias="PAYMENTS_CSV_PATH")

    class Config:
        case_sensitive = False
        env_file = ".env"
        populate_by_name = True

    def validate_required_settings(self):
        """Validate that settings hold usable values."""
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(
                f"TIMEZONE '{self.timezone}' is not a known IANA timezone "
                "(e.g., UTC or Europe/Warsaw)."
            )
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL '{self.log_level}' is invalid. "
                f"Use one of: {', '.join(LOG_LEVELS)}."
            )

    @property
    def tzinfo(self) -> ZoneInfo:
        """Timezone used when reading the wall clock."""
        return ZoneInfo(self.timezone)


# Global settings instance
settings = Settings()


# Validate settings on module import (only in non-test environments)
if settings.environment != "test":
    try:
        settings.validate_required_settings()
    except ValueError as e:
        logging.getLogger(__name__).error("Configuration Error: %s", e)
        # Don't raise in development to allow partial setup
        if settings.environment == "production":
            raise
