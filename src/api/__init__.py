"""HTTP API.

Thin FastAPI routers over the import lifecycle manager and the live
intake pipeline.

Example:
    from src.api import create_app
    app = create_app()
"""

from src.api.config import APIConfig, DEFAULT_API_CONFIG
from src.api.models import (
    ConsolidateRequest,
    DocumentResponse,
    HealthResponse,
    ImportResponse,
    IntakeConfigRequest,
    IntakeConfigResponse,
    LiveTradeRequest,
    LiveTradeResponse,
    MessageResponse,
    PendingCountResponse,
    TradeResponse,
)
from src.api.dependencies import get_manager, get_pipeline
from src.api.app import create_app

__all__ = [
    # Config
    "APIConfig",
    "DEFAULT_API_CONFIG",
    # Models - Common
    "HealthResponse",
    "MessageResponse",
    # Models - Imports
    "ConsolidateRequest",
    "DocumentResponse",
    "ImportResponse",
    "TradeResponse",
    # Models - Live trades
    "LiveTradeRequest",
    "LiveTradeResponse",
    "PendingCountResponse",
    "IntakeConfigRequest",
    "IntakeConfigResponse",
    # Dependencies
    "get_manager",
    "get_pipeline",
    # App
    "create_app",
]
