"""Logging Configuration.

Log level, output format and the knobs the formatters, the tracing
middleware and the timing decorator read. ``TRADEFLOW_LOG_LEVEL`` and
``TRADEFLOW_LOG_FORMAT`` override the level and format at startup.
"""

import os
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping, Optional

LEVEL_ENV_VAR = "TRADEFLOW_LOG_LEVEL"
FORMAT_ENV_VAR = "TRADEFLOW_LOG_FORMAT"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """JSON lines for deployments, colored text for a terminal."""
    JSON = "json"
    CONSOLE = "console"


@dataclass
class LoggingConfig:
    """Structured logging configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    include_caller: bool = True
    # Lifecycle operations slower than this log at WARNING
    slow_threshold_ms: float = 1000.0
    service_name: str = "tradeflow"
    # Paths the tracing middleware serves without an access log line
    exclude_paths: list[str] = field(default_factory=lambda: ["/health"])
    quiet_loggers: tuple[str, ...] = ("sqlalchemy.engine", "uvicorn.access", "httpx")

    def with_env_overrides(self, environ: Optional[Mapping[str, str]] = None) -> "LoggingConfig":
        """Copy of this config with level/format taken from the environment.

        Unknown values are ignored rather than rejected.
        """
        environ = os.environ if environ is None else environ
        changes = {}

        level = environ.get(LEVEL_ENV_VAR, "").strip().upper()
        if level in LogLevel.__members__:
            changes["level"] = LogLevel(level)

        fmt = environ.get(FORMAT_ENV_VAR, "").strip().lower()
        if fmt in {f.value for f in LogFormat}:
            changes["format"] = LogFormat(fmt)

        return replace(self, exclude_paths=list(self.exclude_paths), **changes)


DEFAULT_LOGGING_CONFIG = LoggingConfig()
