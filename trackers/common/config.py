"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


class HTTPSettings(BaseModel):
    """Settings shared by every outbound API client."""
    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_base: float = 2.0
    rate_limit_rpm: int = 60
    user_agent: str = "personal-trackers/0.1 (+https://github.com/)"


class StorageSettings(BaseModel):
    """Key-value persistence settings."""
    backend: str = "sqlite"  # sqlite | json | memory
    sqlite_path: str = str(DATA_DIR / "trackers.db")
    json_dir: str = str(DATA_DIR / "store")


class ShippingSettings(BaseModel):
    """Shipping tracker settings."""
    demo_mode: bool = True
    simulated_delay_seconds: float = 0.9
    store_key: str = "shippingTracker_packages"
    aftership_base_url: str = "https://api.aftership.com/v4"
    opencage_base_url: str = "https://api.opencagedata.com/geocode/v1"
    default_carrier: str = "ups"


class ShoppingSettings(BaseModel):
    """Shopping tracker settings."""
    store_key: str = "shoppingTracker_items"
    budget_store_key: str = "shoppingTracker_budget"
    open_food_facts_base_url: str = "https://world.openfoodfacts.org/api/v2"
    exchange_api_url: str = "https://api.exchangerate.host/live"
    default_budget: float = 200.0
    search_debounce_seconds: float = 0.7
    min_query_length: int = 3
    max_quantity: int = 99
    display_currency: str = "EUR"


class MovieSettings(BaseModel):
    """Movie tracker settings."""
    store_key: str = "movieTracker_watchlist"
    omdb_base_url: str = "https://www.omdbapi.com/"
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_image_base_url: str = "https://image.tmdb.org/t/p/w500"
    tmdb_backdrop_base_url: str = "https://image.tmdb.org/t/p/w1280"
    trending_limit: int = 12


class NotifySettings(BaseModel):
    """Toast notification settings."""
    default_duration_ms: int = 3500
    history_size: int = 50


class Settings(BaseModel):
    """Top-level application settings."""
    http: HTTPSettings = Field(default_factory=HTTPSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    shipping: ShippingSettings = Field(default_factory=ShippingSettings)
    shopping: ShoppingSettings = Field(default_factory=ShoppingSettings)
    movies: MovieSettings = Field(default_factory=MovieSettings)
    notify: NotifySettings = Field(default_factory=NotifySettings)

    @classmethod
    def load(cls, settings_path: Path | None = None) -> Settings:
        """Load settings from config/settings.yaml, falling back to defaults.

        Environment overrides are applied on top of the file values.
        """
        settings_path = settings_path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        settings = cls(**data)
        settings._apply_env_overrides()
        return settings

    def _apply_env_overrides(self) -> None:
        if demo := os.getenv("TRACKERS_DEMO_MODE"):
            self.shipping.demo_mode = demo.strip().lower() in ("1", "true", "yes", "on")
        if backend := os.getenv("TRACKERS_STORAGE_BACKEND"):
            self.storage.backend = backend.strip().lower()
        if data_dir := os.getenv("TRACKERS_DATA_DIR"):
            self.storage.sqlite_path = str(Path(data_dir) / "trackers.db")
            self.storage.json_dir = str(Path(data_dir) / "store")
        if timeout := os.getenv("REQUEST_TIMEOUT"):
            self.http.timeout_seconds = float(timeout)
        if rpm := os.getenv("RATE_LIMIT_REQUESTS_PER_MINUTE"):
            self.http.rate_limit_rpm = int(rpm)


def get_aftership_api_key() -> str:
    """Get AfterShip API key from environment (empty when unset)."""
    return os.getenv("AFTERSHIP_API_KEY", "")


def get_opencage_api_key() -> str:
    """Get OpenCage API key from environment (empty when unset)."""
    return os.getenv("OPENCAGE_API_KEY", "")


def get_omdb_api_key() -> str:
    """Get OMDb API key from environment.

    Falls back to the public demo key, which is heavily rate limited.
    """
    return os.getenv("OMDB_API_KEY", "trilogy")


def get_tmdb_api_token() -> str:
    """Get TMDB read access token from environment."""
    token = os.getenv("TMDB_API_TOKEN", "")
    if not token:
        raise ValueError("TMDB_API_TOKEN not set in environment")
    return token


# Singleton settings instance
settings = Settings.load()
