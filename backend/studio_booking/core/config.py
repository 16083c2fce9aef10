# backend/studio_booking/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug("[CONFIG] Looking for .env at: %s (exists=%s)", env_path, env_path.exists())
    load_dotenv(env_path)


class Settings(BaseSettings):
    """Process-level settings. Business rules live in the booking_settings table."""

    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Deployment environment name",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    database_url: str = Field(
        default="sqlite:///./studio_booking.db",
        description="SQLAlchemy URL (PostgreSQL in production, SQLite locally)",
    )
    database_pool_size: int = Field(default=5, ge=1)
    database_max_overflow: int = Field(default=5, ge=0)
    database_pool_timeout: int = Field(
        default=2,
        ge=1,
        description="Seconds to wait for a pooled connection before failing fast",
    )

    studio_timezone: str = Field(
        default="Asia/Kolkata",
        description="IANA timezone all studios operate in",
    )
    slot_granularity_minutes: int = Field(
        default=60,
        ge=5,
        le=240,
        description="Default width of an availability slot",
    )
    booking_lock_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Max wait for the per studio/date booking lock",
    )
    seed_studios: bool = Field(
        default=True,
        description="Insert the default studio catalog on startup when the table is empty",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("studio_timezone")
    @classmethod
    def _validate_timezone(cls, v: str) -> str:
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        return v.strip().upper()

    def get_database_url(self) -> str:
        """Return the database URL, normalizing legacy postgres:// schemes."""
        url = self.database_url.strip()
        if url.startswith("postgres://"):
            url = "postgresql://" + url[len("postgres://") :]
        return url


settings = Settings()
