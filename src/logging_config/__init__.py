"""Structured Logging & Context Binding.

Provides structured JSON logging, request and import ID propagation,
request tracing middleware, and performance timing for the Tradeflow
service.
"""

from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import (
    ImportContext,
    RequestContext,
    generate_request_id,
    get_context_dict,
    get_request_id,
)
from src.logging_config.middleware import REQUEST_ID_HEADER, RequestTracingMiddleware
from src.logging_config.performance import log_performance
from src.logging_config.setup import configure_logging

__all__ = [
    "ImportContext",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "REQUEST_ID_HEADER",
    "RequestContext",
    "RequestTracingMiddleware",
    "configure_logging",
    "generate_request_id",
    "get_context_dict",
    "get_request_id",
    "log_performance",
]
