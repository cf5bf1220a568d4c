"""Logging Setup.

One call at startup routes the root logger through either a JSON line
formatter or a colored console formatter. Both append whatever context
is bound at the time of the call (request_id, import_id, operation).
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from src.logging_config.config import DEFAULT_LOGGING_CONFIG, LogFormat, LoggingConfig
from src.logging_config.context import get_context_dict

# Attributes passed through ``extra=`` that are copied into JSON output
EXTRA_FIELDS = (
    "duration_ms",
    "trade_count",
    "criteria",
    "method",
    "path",
    "status_code",
)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record.

    Always present: timestamp, level, logger, message, service, thread.
    Optional: caller location, bound context, exception, extra fields.
    """

    def __init__(self, service_name: str = "tradeflow", include_caller: bool = True):
        super().__init__()
        self.service_name = service_name
        self.include_caller = include_caller

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "thread": record.threadName,
        }
        if self.include_caller:
            entry.update(module=record.module, function=record.funcName, line=record.lineno)

        entry.update(get_context_dict())

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }

        entry.update(
            (name, getattr(record, name)) for name in EXTRA_FIELDS if hasattr(record, name)
        )
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """``HH:MM:SS.mmm LEVEL thread logger: message [context]`` with ANSI colors."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, "")
        clock = datetime.fromtimestamp(record.created, timezone.utc).strftime("%H:%M:%S.%f")[:-3]
        line = (
            f"{color}{clock} {record.levelname:<8}{self.RESET} "
            f"{record.threadName} {record.name}: {record.getMessage()}"
        )

        context = get_context_dict()
        if context:
            line += " [" + ", ".join(f"{k}={v}" for k, v in context.items()) + "]"

        if record.exc_info and record.exc_info[0] is not None:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def build_formatter(config: LoggingConfig) -> logging.Formatter:
    if config.format == LogFormat.CONSOLE:
        return ConsoleFormatter()
    return StructuredFormatter(
        service_name=config.service_name,
        include_caller=config.include_caller,
    )


def configure_logging(config: Optional[LoggingConfig] = None) -> LoggingConfig:
    """Install a single stdout handler on the root logger.

    Call once at startup. Level and format from *config* (or the
    defaults) can be overridden with TRADEFLOW_LOG_LEVEL and
    TRADEFLOW_LOG_FORMAT.

    Returns:
        The effective configuration after environment overrides.
    """
    config = (config or DEFAULT_LOGGING_CONFIG).with_env_overrides()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(config))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(config.level.value)

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
    return config
