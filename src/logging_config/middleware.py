"""FastAPI Request Tracing Middleware.

Every HTTP request runs inside a ``RequestContext`` so log lines from
route handlers, the lifecycle manager and the error handlers share one
request_id. The id is echoed back in the ``X-Request-ID`` header.
"""

import logging
import time
from typing import Optional

from src.logging_config.config import DEFAULT_LOGGING_CONFIG, LoggingConfig
from src.logging_config.context import RequestContext, generate_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
_HEADER_KEY = REQUEST_ID_HEADER.lower().encode()


def _incoming_request_id(scope) -> Optional[str]:
    for key, value in scope.get("headers", []):
        if key == _HEADER_KEY and value:
            return value.decode("utf-8", errors="replace")
    return None


class RequestTracingMiddleware:
    """Pure ASGI middleware; reuses a caller's X-Request-ID when present.

    Usage:
        app.add_middleware(RequestTracingMiddleware)
    """

    def __init__(self, app, config: Optional[LoggingConfig] = None):
        self.app = app
        self.config = config or DEFAULT_LOGGING_CONFIG

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = _incoming_request_id(scope) or generate_request_id()
        started = time.perf_counter()
        status = {"code": 500}

        async def send_with_request_id(message):
            if message["type"] == "http.response.start":
                status["code"] = message.get("status", 500)
                headers = list(message.get("headers", []))
                headers.append((_HEADER_KEY, request_id.encode()))
                message = {**message, "headers": headers}
            await send(message)

        with RequestContext(request_id=request_id):
            try:
                await self.app(scope, receive, send_with_request_id)
            finally:
                self._log_request(scope, status["code"], started)

    def _log_request(self, scope, status_code: int, started: float) -> None:
        path = scope.get("path", "")
        if path in self.config.exclude_paths:
            return
        method = scope.get("method", "")
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.log(
            logging.WARNING if status_code >= 500 else logging.INFO,
            "%s %s -> %d",
            method,
            path,
            status_code,
            extra={
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": duration_ms,
            },
        )
