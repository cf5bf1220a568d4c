"""API Configuration.

Settings for the REST API surface: metadata, prefix and CORS.
"""

from dataclasses import dataclass, field
from typing import Optional

from src.settings import Settings, get_settings


@dataclass
class APIConfig:
    """Core API settings."""

    title: str = "Tradeflow API"
    version: str = "1.0.0"
    description: str = "FX trade import, consolidation and confirmation service"
    prefix: str = "/api/v1"
    docs_url: str = "/docs"
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])
    cors_methods: list[str] = field(default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "OPTIONS"])
    cors_headers: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "APIConfig":
        settings = settings or get_settings()
        return cls(prefix=settings.api_prefix, cors_origins=list(settings.cors_origins))


DEFAULT_API_CONFIG = APIConfig()
