import logging
from datetime import date
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Upstream Feed Configuration
    scoreboard_base_url: str = Field(
        "https://site.api.espn.com/apis/site/v2/sports/tennis",
        description="Base URL of the per-tour scoreboard feed.",
    )
    feed_timeout_seconds: float = Field(
        4.0, gt=0, description="Timeout for a single scoreboard request."
    )
    feed_max_attempts: int = Field(
        2, ge=1, description="Attempts for transient scoreboard failures."
    )
    cache_buster_window_seconds: int = Field(
        5, ge=1, description="Width of the cache-buster bucket in seconds."
    )
    points_timeout_seconds: float = Field(
        4.0, gt=0, description="Timeout for a single live points lookup."
    )

    # Cache Configuration
    scoreboard_cache_ttl_seconds: float = Field(5, gt=0)
    scoreboard_cache_max_entries: int = Field(100, ge=1)
    points_cache_ttl_seconds: float = Field(15, gt=0)
    points_cache_max_entries: int = Field(200, ge=1)

    # Tournament Configuration
    tournament_name: str = Field(
        "us open", description="Substring identifying the tournament's events."
    )
    home_timezone: str = Field(
        "America/New_York", description="Timezone that defines a tournament day."
    )
    tournament_start_date: date = date(2025, 8, 25)
    tournament_end_date: date = date(2025, 9, 7)

    # API Configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    cors_origins: List[str] = ["http://localhost:3000"]
    cache_control_max_age: int = Field(15, ge=0)
    cache_control_stale_while_revalidate: int = Field(30, ge=0)

    # Poller Configuration
    poll_interval_seconds: float = Field(5.0, gt=0)

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )
    log_json: bool = Field(False, description="Serialize log records as JSON.")

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def cache_control_header(self) -> str:
        return (
            f"public, max-age={self.cache_control_max_age}, "
            f"stale-while-revalidate={self.cache_control_stale_while_revalidate}"
        )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
