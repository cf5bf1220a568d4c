"""FastAPI Application Factory.

Creates and configures the Tradeflow API application with its
middleware stack: request tracing, structured error handling and CORS.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.config import APIConfig
from src.api.dependencies import (
    get_manager,
    get_pipeline,
    shutdown_pipeline,
    start_pipeline,
)
from src.api.models import HealthResponse
from src.api.routes import imports, live_trades
from src.api_errors import register_exception_handlers
from src.db.engine import init_db
from src.imports.manager import ImportLifecycleManager
from src.live_intake.pipeline import LiveIntakePipeline
from src.logging_config import RequestTracingMiddleware, configure_logging

logger = logging.getLogger(__name__)


# ── Lifespan (startup / shutdown) ────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize logging, schema and the live intake pipeline at startup."""
    # ── Startup ──
    configure_logging()
    init_db()
    pipeline = start_pipeline()
    logger.info("Tradeflow API starting up (live intake enabled=%s)", pipeline.config.enabled)
    yield
    # ── Shutdown ──
    shutdown_pipeline()
    logger.info("Tradeflow API shutting down")


# ── App Factory ──────────────────────────────────────────────────────


def create_app(config: Optional[APIConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Middleware stack (outermost → innermost):
        RequestTracing → CORS → App

    Args:
        config: API configuration. Built from settings if not provided.

    Returns:
        Configured FastAPI application.
    """
    config = config or APIConfig.from_settings()

    app = FastAPI(
        title=config.title,
        version=config.version,
        description=config.description,
        docs_url=config.docs_url,
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────────
    # add_middleware prepends, so order here is innermost-first.

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=config.cors_methods,
        allow_headers=config.cors_headers,
    )
    app.add_middleware(RequestTracingMiddleware)

    register_exception_handlers(app)

    # ── Health check ─────────────────────────────────────────────

    @app.get("/health", response_model=HealthResponse)
    def health(
        manager: ImportLifecycleManager = Depends(get_manager),
        pipeline: LiveIntakePipeline = Depends(get_pipeline),
    ) -> HealthResponse:
        components = {}

        try:
            manager.check_database()
            components["database"] = "ok"
        except Exception as e:
            components["database"] = f"error: {e}"

        live = pipeline.config
        components["live_intake"] = "running" if live.enabled else "idle"

        overall = "ok" if components["database"] == "ok" else "degraded"
        return HealthResponse(status=overall, version=config.version, components=components)

    # ── Route modules ────────────────────────────────────────────

    app.include_router(imports.router, prefix=config.prefix)
    app.include_router(live_trades.router, prefix=config.prefix)

    logger.info("Tradeflow API v%s initialized", config.version)
    return app
