"""Custom Exception Hierarchy.

Defines typed exceptions that map to specific error codes and HTTP
status codes. The lifecycle manager, the live intake pipeline and the
document archive raise these; the API layer turns them into responses.
"""

from typing import Any, Dict, List, Optional

from src.api_errors.config import ErrorCode, ERROR_STATUS_MAP


class TradeflowError(Exception):
    """Base exception for all Tradeflow errors.

    All custom exceptions inherit from this, allowing a single
    exception handler to catch the entire hierarchy.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = ERROR_STATUS_MAP.get(error_code, 500)
        self.details = details or []


class ValidationError(TradeflowError):
    """Raised when input (a CSV row, a submission, a config) is malformed."""

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
        field: Optional[str] = None,
        row: Optional[int] = None,
    ):
        if (field or row is not None) and not details:
            detail: Dict[str, Any] = {"issue": message}
            if field:
                detail["field"] = field
            if row is not None:
                detail["row"] = row
            details = [detail]
        super().__init__(message, error_code, details)
        self.field = field
        self.row = row


class NotFoundError(TradeflowError):
    """Raised when a referenced import, trade or document does not exist."""

    def __init__(
        self,
        message: str = "Resource not found",
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
        resource_type: Optional[str] = None,
        resource_id: Optional[Any] = None,
    ):
        details = []
        if resource_type or resource_id is not None:
            details = [{"resource_type": resource_type, "resource_id": resource_id}]
        super().__init__(message, error_code, details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class InvalidStateError(TradeflowError):
    """Raised when an operation is not legal for the import's current status."""

    def __init__(
        self,
        message: str = "Operation not allowed in current state",
        current_status: Optional[str] = None,
    ):
        details = []
        if current_status:
            details = [{"current_status": current_status}]
        super().__init__(message, ErrorCode.INVALID_STATE, details)
        self.current_status = current_status


class AggregationError(TradeflowError):
    """Raised when packing generated documents into an archive fails."""

    def __init__(self, message: str = "Failed to build document archive"):
        super().__init__(message, ErrorCode.AGGREGATION_FAILURE)
