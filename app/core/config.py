"""
Application configuration using pydantic-settings.
All environment variables are loaded from .env file with sensible defaults.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    APP_NAME: str = "Transaction Explorer API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    # Database (SQLite by default, any SQLAlchemy URL works)
    DATABASE_URL: str = "sqlite:///./transactions.db"

    # Redis (only used to cache facet lists)
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_ENABLED: bool = False  # Disable by default for easy local dev
    FACET_CACHE_TTL: int = 600

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Query defaults
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    DEFAULT_SORT_BY: str = "Date"
    DEFAULT_SORT_ORDER: str = "desc"

    # Bulk load
    SEED_ON_STARTUP: bool = True
    SEED_CSV_PATH: str = ""  # Empty -> generate demo data instead
    SEED_BATCH_SIZE: int = 5000
    SEED_MAX_RECORDS: int = 500000
    SEED_DEMO_RECORDS: int = 500

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance to avoid re-reading .env on every call."""
    return Settings()
