"""Application configuration management."""
from pydantic import model_validator, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from sqlalchemy.engine.url import make_url, URL
from typing import Optional
import logging

SQLITE_LOCAL_URL = "sqlite+aiosqlite:///./countryquiz.db"
REST_COUNTRIES_URL = "https://restcountries.com/v3.1/all?fields=name,cca3,flags,capital,region,population"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = SQLITE_LOCAL_URL
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # Application
    environment: str = "development"
    log_dir: str = "logs"

    # Game constants
    options_count: int = 4  # Answer buttons shown per question (distractors + 1)
    points_correct: int = 10
    points_incorrect: int = -5
    leaderboard_limit: int = 10

    # Country catalog
    countries_api_url: str = REST_COUNTRIES_URL
    countries_local_file: str = "countryquiz/data/all.json"
    catalog_max_retries: int = 2
    catalog_retry_delay_seconds: float = 2.0
    catalog_connect_timeout_seconds: float = 5.0
    catalog_read_timeout_seconds: float = 100.0  # REST Countries can be slow
    catalog_refresh_on_startup: bool = True

    # Round service tuning
    round_lock_timeout_seconds: int = 10

    @field_validator("options_count")
    @classmethod
    def validate_options_count(cls, value: int) -> int:
        if value < 2:
            raise ValueError("options_count must be at least 2")
        return value

    @field_validator("catalog_max_retries")
    @classmethod
    def validate_max_retries(cls, value: int) -> int:
        if value < 1:
            raise ValueError("catalog_max_retries must be at least 1")
        return value

    @field_validator("catalog_retry_delay_seconds")
    @classmethod
    def validate_retry_delay(cls, value: float) -> float:
        if value < 0:
            raise ValueError("catalog_retry_delay_seconds cannot be negative")
        return value

    @model_validator(mode="after")
    def normalize_database_url(self):
        """Normalize Postgres URLs to the asyncpg driver."""
        logger = logging.getLogger(__name__)

        url = self.database_url
        if not url:
            logger.warning("Empty DATABASE_URL, using SQLite fallback")
            self.database_url = SQLITE_LOCAL_URL
            return self

        parsed: Optional[URL] = None
        try:
            parsed = make_url(url)
        except Exception as e:
            logger.error(f"Failed to parse DATABASE_URL: {e}")
            logger.warning(f"Invalid DATABASE_URL; falling back to default sqlite database.")
            self.database_url = SQLITE_LOCAL_URL
            return self

        drivername = parsed.drivername
        if drivername.startswith("postgres") and "+asyncpg" not in drivername:
            parsed = parsed.set(drivername="postgresql+asyncpg")
            logger.info(f"Driver normalized: {drivername} -> {parsed.drivername}")
        elif drivername == "sqlite":
            parsed = parsed.set(drivername="sqlite+aiosqlite")
            logger.info(f"Driver normalized: {drivername} -> {parsed.drivername}")

        # Use render_as_string to properly re-encode special characters in password
        self.database_url = parsed.render_as_string(hide_password=False)
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
