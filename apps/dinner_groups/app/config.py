from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DB_PATH = DATA_DIR / "dinner_groups.sqlite3"


class Settings(BaseSettings):
    """Configuration settings for the application."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    google_places_api_key: str = ""
    database_url: str = f"sqlite:///{DB_PATH}"

    # Hilton Salt Lake City Center
    conference_lat: float = 40.7596
    conference_lng: float = -111.8867

    places_timeout: float = 10.0
    places_max_workers: int = 8

    restaurant_cache_ttl: int = 60 * 60 * 24
    restaurant_cache_size: int = 500

    log_level: str = "INFO"


settings = Settings()
