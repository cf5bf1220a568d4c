"""Error Configuration.

Defines error codes, severity levels, and configuration for
structured error handling across the Tradeflow service.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class ErrorCode(Enum):
    """Standardized error codes for service and API responses."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_CSV_ROW = "INVALID_CSV_ROW"
    INVALID_CRITERIA = "INVALID_CRITERIA"
    INVALID_CONFIG = "INVALID_CONFIG"

    # Not found errors (404)
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    IMPORT_NOT_FOUND = "IMPORT_NOT_FOUND"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"

    # Lifecycle errors (409)
    INVALID_STATE = "INVALID_STATE"

    # Server errors (500)
    AGGREGATION_FAILURE = "AGGREGATION_FAILURE"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorSeverity(Enum):
    """Severity levels for error logging."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Map error codes to HTTP status codes
ERROR_STATUS_MAP: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_CSV_ROW: 400,
    ErrorCode.INVALID_CRITERIA: 400,
    ErrorCode.INVALID_CONFIG: 400,
    ErrorCode.RESOURCE_NOT_FOUND: 404,
    ErrorCode.IMPORT_NOT_FOUND: 404,
    ErrorCode.DOCUMENT_NOT_FOUND: 404,
    ErrorCode.INVALID_STATE: 409,
    ErrorCode.AGGREGATION_FAILURE: 500,
    ErrorCode.DATABASE_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}

# Map error codes to severity
ERROR_SEVERITY_MAP: Dict[ErrorCode, ErrorSeverity] = {
    ErrorCode.VALIDATION_ERROR: ErrorSeverity.LOW,
    ErrorCode.INVALID_CSV_ROW: ErrorSeverity.LOW,
    ErrorCode.INVALID_CRITERIA: ErrorSeverity.LOW,
    ErrorCode.INVALID_CONFIG: ErrorSeverity.LOW,
    ErrorCode.RESOURCE_NOT_FOUND: ErrorSeverity.LOW,
    ErrorCode.IMPORT_NOT_FOUND: ErrorSeverity.LOW,
    ErrorCode.DOCUMENT_NOT_FOUND: ErrorSeverity.LOW,
    ErrorCode.INVALID_STATE: ErrorSeverity.MEDIUM,
    ErrorCode.AGGREGATION_FAILURE: ErrorSeverity.HIGH,
    ErrorCode.DATABASE_ERROR: ErrorSeverity.CRITICAL,
    ErrorCode.INTERNAL_ERROR: ErrorSeverity.CRITICAL,
}


@dataclass
class ErrorConfig:
    """Configuration for API error handling."""

    include_request_id: bool = True
    log_all_errors: bool = True
    suppress_internal_details: bool = True


DEFAULT_ERROR_CONFIG = ErrorConfig()
