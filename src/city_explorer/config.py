"""
Application configuration using Pydantic Settings.

All settings are loaded from environment variables or .env file.
Provider keys keep the variable names the deployment already uses
(GEOCODE_API_KEY, DARKSKY_API_KEY, YELP_API_KEY, MOVIE_API_KEY).
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_config(prefix: str = "") -> SettingsConfigDict:
    """Every settings group reads the process environment first, then .env."""
    return SettingsConfigDict(
        env_prefix=prefix,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class DatabaseSettings(BaseSettings):
    """Database connection settings."""

    url: str = "sqlite:///./data/city_explorer.db"

    model_config = _env_config("DATABASE_")


class APISettings(BaseSettings):
    """FastAPI server settings."""

    host: str = "0.0.0.0"
    port: int = 5000
    reload: bool = False
    cors_origins: list[str] = ["*"]

    model_config = _env_config("API_")


class ProviderSettings(BaseSettings):
    """Upstream provider endpoints and credentials."""

    geocode_api_key: Optional[str] = None
    darksky_api_key: Optional[str] = None
    yelp_api_key: Optional[str] = None
    movie_api_key: Optional[str] = None

    geocode_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    weather_url: str = "https://api.darksky.net/forecast"
    yelp_url: str = "https://api.yelp.com/v3/businesses/search"
    movie_url: str = "https://api.themoviedb.org/3/search/movie"
    movie_image_base_url: str = "https://image.tmdb.org/t/p/original"

    # None means wait forever, like the original deployment
    provider_timeout: Optional[float] = None

    model_config = _env_config("")

    @field_validator("provider_timeout", mode="before")
    @classmethod
    def parse_timeout(cls, v: str | float | None) -> float | None:
        if v is None or v == "":
            return None
        return v


class CacheSettings(BaseSettings):
    """Cache-aside write behaviour."""

    strict_writes: bool = False

    model_config = _env_config("CACHE_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: str = "INFO"
    file: str = "logs/city_explorer.log"

    model_config = _env_config("LOG_")


class Settings(BaseSettings):
    """Main application settings: aggregates all sub-settings."""

    # Built per Settings() call so each group reads the current .env
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    api: APISettings = Field(default_factory=APISettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = _env_config()

    def setup(self) -> None:
        """Create the directories the configured database and log file live in."""
        log_dir = Path(self.logging.file).parent
        log_dir.mkdir(parents=True, exist_ok=True)

        if self.database.url.startswith("sqlite:///") and ":memory:" not in self.database.url:
            db_path = Path(self.database.url.removeprefix("sqlite:///"))
            db_path.parent.mkdir(parents=True, exist_ok=True)


# Global settings instance: import this in other modules
settings = Settings()
