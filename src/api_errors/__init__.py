"""Error taxonomy and API error handling.

Provides the typed exception hierarchy raised by the lifecycle
manager and live intake pipeline, plus structured error responses
and FastAPI exception handlers.
"""

from src.api_errors.config import (
    ErrorCode,
    ErrorConfig,
    ErrorSeverity,
)
from src.api_errors.exceptions import (
    AggregationError,
    InvalidStateError,
    NotFoundError,
    TradeflowError,
    ValidationError,
)
from src.api_errors.handlers import (
    ErrorResponse,
    create_error_response,
    handle_database_error,
    register_exception_handlers,
)

__all__ = [
    # Config
    "ErrorCode",
    "ErrorConfig",
    "ErrorSeverity",
    # Exceptions
    "AggregationError",
    "InvalidStateError",
    "NotFoundError",
    "TradeflowError",
    "ValidationError",
    # Handlers
    "ErrorResponse",
    "create_error_response",
    "handle_database_error",
    "register_exception_handlers",
]
