import logging
from typing import Optional

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Supabase Configuration
    supabase_url: Optional[HttpUrl] = Field(
        None, description="URL for the Supabase project."
    )
    supabase_key: Optional[str] = Field(
        None, description="Service key for the Supabase project."
    )
    live_meetings_table: str = Field(
        "live_meetings", description="Table holding scraped live meetings."
    )
    regions_table: str = Field("regions", description="Region lookup table.")
    counties_table: str = Field("counties", description="County lookup table.")

    # Source sites
    swimming_results_base_url: str = Field(
        "https://www.swimmingresults.org",
        description="Base URL of the licensed meets listing site.",
    )
    streaming_results_base_url: str = Field(
        "https://www.streamingresults.org",
        description="Base URL of the date-partitioned meeting listing site.",
    )

    # HTTP Configuration
    request_timeout: float = Field(
        30.0, gt=0, description="Timeout in seconds for a single page fetch."
    )
    user_agent: str = Field(
        "Mozilla/5.0 (X11; Linux x86_64; rv:134.0) Gecko/20100101 Firefox/134.0",
        description="User-Agent header sent to source sites.",
    )

    # Scrape Settings
    rate_limit_seconds: float = Field(
        1.0,
        ge=0,
        description="Pause between successive page fetches within one scrape.",
    )
    fetch_attempts: int = Field(
        1,
        ge=1,
        le=10,
        description="Total attempts per page fetch (1 disables retries).",
    )
    refresh_window_days: int = Field(
        7, ge=0, description="Days ahead covered by refresh_upcoming_meetings."
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


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
