"""Centralized settings for the Tradeflow service.

Uses pydantic-settings to load from environment variables (prefixed TRADEFLOW_)
with defaults suitable for a local SQLite-backed deployment.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Tradeflow settings loaded from environment variables."""

    # --- Database ---
    database_url: str = "sqlite:///tradeflow.db"
    database_echo: bool = False

    # --- Live intake defaults ---
    scheduler_pool_size: int = 5
    live_enabled: bool = False
    live_trades_per_second: float = 2.0
    live_grouping_interval_seconds: int = 10
    live_auto_documents_enabled: bool = False
    live_document_interval_seconds: int = 20

    # --- Documents ---
    document_extension: str = "xml"

    # --- API ---
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = {
        "env_prefix": "TRADEFLOW_",
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
