"""Exception Handlers & Error Response Builder.

Every failure leaving the API uses one JSON envelope:

    {"error": {"code", "message", "timestamp", "details"?, "request_id"?}}

Tradeflow errors keep their own code and status. Database failures and
anything unexpected become 500s whose message hides internals unless
``ErrorConfig.suppress_internal_details`` is off.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from src.api_errors.config import (
    DEFAULT_ERROR_CONFIG,
    ERROR_SEVERITY_MAP,
    ERROR_STATUS_MAP,
    ErrorCode,
    ErrorConfig,
    ErrorSeverity,
)
from src.api_errors.exceptions import TradeflowError
from src.logging_config.context import get_request_id

logger = logging.getLogger(__name__)

_SEVERITY_LOG_LEVELS = {
    ErrorSeverity.LOW: logging.INFO,
    ErrorSeverity.MEDIUM: logging.WARNING,
    ErrorSeverity.HIGH: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


@dataclass
class ErrorResponse:
    """Structured error response envelope."""

    code: str
    message: str
    status_code: int = 500
    details: List[Dict[str, Any]] = field(default_factory=list)
    request_id: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "timestamp": self.timestamp,
        }
        if self.details:
            error["details"] = self.details
        if self.request_id:
            error["request_id"] = self.request_id
        return {"error": error}

    def to_json_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.to_dict())


def create_error_response(
    error_code: ErrorCode,
    message: str,
    details: Optional[List[Dict[str, Any]]] = None,
    request_id: Optional[str] = None,
    status_code: Optional[int] = None,
) -> ErrorResponse:
    """Build an ErrorResponse; the status defaults to the code's mapped status."""
    return ErrorResponse(
        code=error_code.value,
        message=message,
        status_code=status_code or ERROR_STATUS_MAP.get(error_code, 500),
        details=details or [],
        request_id=request_id,
    )


def _request_id(config: ErrorConfig) -> Optional[str]:
    return (get_request_id() or None) if config.include_request_id else None


def _log_error(error_code: ErrorCode, message: str, status_code: int, config: ErrorConfig) -> None:
    if not config.log_all_errors:
        return
    severity = ERROR_SEVERITY_MAP.get(error_code, ErrorSeverity.MEDIUM)
    logger.log(
        _SEVERITY_LOG_LEVELS[severity],
        "API error [%s] (%d): %s",
        error_code.value,
        status_code,
        message,
    )


def _internal_response(
    error_code: ErrorCode, exc: Exception, generic_message: str, config: ErrorConfig
) -> ErrorResponse:
    message = generic_message
    if not config.suppress_internal_details:
        message = f"{type(exc).__name__}: {exc}"
    return create_error_response(error_code, message, request_id=_request_id(config))


def handle_tradeflow_error(
    exc: TradeflowError, config: Optional[ErrorConfig] = None
) -> ErrorResponse:
    """Turn a TradeflowError into its response, logging by severity."""
    config = config or DEFAULT_ERROR_CONFIG
    _log_error(exc.error_code, exc.message, exc.status_code, config)
    return create_error_response(
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details,
        request_id=_request_id(config),
        status_code=exc.status_code,
    )


def handle_database_error(
    exc: SQLAlchemyError, config: Optional[ErrorConfig] = None
) -> ErrorResponse:
    """A failed transaction; the operation was rolled back."""
    config = config or DEFAULT_ERROR_CONFIG
    logger.error("Database error: %s", exc, exc_info=exc)
    return _internal_response(ErrorCode.DATABASE_ERROR, exc, "A database error occurred", config)


def handle_unhandled_error(exc: Exception, config: Optional[ErrorConfig] = None) -> ErrorResponse:
    config = config or DEFAULT_ERROR_CONFIG
    logger.error("Unhandled exception: %s: %s", type(exc).__name__, exc, exc_info=exc)
    return _internal_response(ErrorCode.INTERNAL_ERROR, exc, "An internal error occurred", config)


def register_exception_handlers(app: Any, config: Optional[ErrorConfig] = None) -> None:
    """Install the Tradeflow, database and catch-all handlers on *app*."""
    config = config or DEFAULT_ERROR_CONFIG

    async def _tradeflow_handler(request, exc: TradeflowError) -> JSONResponse:
        return handle_tradeflow_error(exc, config).to_json_response()

    async def _database_handler(request, exc: SQLAlchemyError) -> JSONResponse:
        return handle_database_error(exc, config).to_json_response()

    async def _unhandled_handler(request, exc: Exception) -> JSONResponse:
        return handle_unhandled_error(exc, config).to_json_response()

    app.add_exception_handler(TradeflowError, _tradeflow_handler)
    app.add_exception_handler(SQLAlchemyError, _database_handler)
    app.add_exception_handler(Exception, _unhandled_handler)
    logger.debug("Registered Tradeflow exception handlers")
