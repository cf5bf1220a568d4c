"""Tests for structured logging, context binding and request tracing."""

import asyncio
import json
import logging
import sys
import time

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.logging_config.config import DEFAULT_LOGGING_CONFIG, LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import (
    ImportContext,
    RequestContext,
    generate_request_id,
    get_context_dict,
    get_request_id,
)
from src.logging_config.middleware import REQUEST_ID_HEADER, RequestTracingMiddleware
from src.logging_config.performance import log_performance
from src.logging_config.setup import (
    ConsoleFormatter,
    StructuredFormatter,
    configure_logging,
)


def _record(msg="test", level=logging.INFO, exc_info=None, lineno=1):
    return logging.LogRecord(
        name="test", level=level, pathname="test.py",
        lineno=lineno, msg=msg, args=(), exc_info=exc_info,
    )


class TestLoggingConfig:
    """Tests for logging configuration defaults."""

    def test_default_config(self):
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.JSON
        assert config.service_name == "tradeflow"
        assert config.slow_threshold_ms == 1000.0

    def test_exclude_paths_default(self):
        assert LoggingConfig().exclude_paths == ["/health"]

    def test_exclude_paths_not_shared(self):
        config = LoggingConfig()
        config.exclude_paths.append("/x")
        assert DEFAULT_LOGGING_CONFIG.exclude_paths == ["/health"]

    def test_log_level_values(self):
        assert [lvl.value for lvl in LogLevel] == ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    def test_with_env_overrides_from_mapping(self):
        base = LoggingConfig(exclude_paths=["/x"])
        config = base.with_env_overrides({"TRADEFLOW_LOG_LEVEL": " warning "})
        assert config.level == LogLevel.WARNING
        assert config.format == LogFormat.JSON
        assert config.exclude_paths == ["/x"]
        assert config.exclude_paths is not base.exclude_paths
        assert base.level == LogLevel.INFO


class TestRequestContext:
    """Tests for request context management."""

    def test_generate_request_id_unique(self):
        ids = {generate_request_id() for _ in range(100)}
        assert len(ids) == 100

    def test_context_sets_request_id(self):
        with RequestContext(request_id="test-123"):
            assert get_request_id() == "test-123"
        assert get_request_id() == ""

    def test_auto_generates_request_id(self):
        with RequestContext() as ctx:
            assert ctx.request_id != ""
            assert get_request_id() == ctx.request_id

    def test_nested_contexts_restore_outer(self):
        with RequestContext(request_id="outer"):
            with RequestContext(request_id="inner"):
                assert get_request_id() == "inner"
            assert get_request_id() == "outer"

    def test_context_dict_empty_outside(self):
        assert get_context_dict() == {}


class TestImportContext:
    """Tests for import/operation binding."""

    def test_binds_import_and_operation(self):
        with ImportContext(import_id=7, operation="consolidate"):
            assert get_context_dict() == {"import_id": 7, "operation": "consolidate"}
        assert get_context_dict() == {}

    def test_bind_after_creation(self):
        with ImportContext(operation="import") as ctx:
            assert "import_id" not in get_context_dict()
            ctx.bind(42)
            assert get_context_dict()["import_id"] == 42
        assert get_context_dict() == {}

    def test_nested_restores_outer_import(self):
        with ImportContext(operation="auto-documents"):
            with ImportContext(import_id=1, operation="generate_documents"):
                assert get_context_dict()["import_id"] == 1
            assert get_context_dict() == {"operation": "auto-documents"}

    def test_combines_with_request_context(self):
        with RequestContext(request_id="r1"), ImportContext(import_id=3, operation="push"):
            ctx = get_context_dict()
        assert ctx == {"request_id": "r1", "import_id": 3, "operation": "push"}


class TestStructuredFormatter:
    """Tests for JSON structured log formatting."""

    def test_formats_as_json(self):
        parsed = json.loads(StructuredFormatter().format(_record("hello world")))
        assert parsed["message"] == "hello world"
        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test"
        assert parsed["service"] == "tradeflow"
        assert "timestamp" in parsed
        assert "thread" in parsed

    def test_includes_caller_info(self):
        parsed = json.loads(StructuredFormatter(include_caller=True).format(_record(lineno=42)))
        assert parsed["line"] == 42
        assert "function" in parsed

    def test_excludes_caller_when_disabled(self):
        parsed = json.loads(StructuredFormatter(include_caller=False).format(_record()))
        assert "line" not in parsed
        assert "module" not in parsed

    def test_includes_bound_context(self):
        formatter = StructuredFormatter()
        with RequestContext(request_id="ctx-test"), ImportContext(import_id=5, operation="push"):
            parsed = json.loads(formatter.format(_record()))
        assert parsed["request_id"] == "ctx-test"
        assert parsed["import_id"] == 5
        assert parsed["operation"] == "push"

    def test_formats_exception(self):
        try:
            raise ValueError("test error")
        except ValueError:
            record = _record("failed", level=logging.ERROR, exc_info=sys.exc_info())
        parsed = json.loads(StructuredFormatter().format(record))
        assert parsed["exception"]["type"] == "ValueError"
        assert parsed["exception"]["message"] == "test error"

    def test_includes_extra_fields(self):
        record = _record()
        record.duration_ms = 42.5
        record.trade_count = 1000
        record.criteria = "CURRENCY_PAIR"
        parsed = json.loads(StructuredFormatter().format(record))
        assert parsed["duration_ms"] == 42.5
        assert parsed["trade_count"] == 1000
        assert parsed["criteria"] == "CURRENCY_PAIR"


class TestConsoleFormatter:
    """Tests for colored console log formatting."""

    def test_formats_readable_output(self):
        output = ConsoleFormatter().format(_record("hello"))
        assert "test: hello" in output
        assert "INFO" in output

    def test_includes_context(self):
        with ImportContext(import_id=9, operation="consolidate"):
            output = ConsoleFormatter().format(_record())
        assert "import_id=9" in output
        assert "operation=consolidate" in output


class TestConfigureLogging:
    """Tests for root logger setup."""

    @pytest.fixture(autouse=True)
    def restore_root(self, monkeypatch):
        monkeypatch.delenv("TRADEFLOW_LOG_LEVEL", raising=False)
        monkeypatch.delenv("TRADEFLOW_LOG_FORMAT", raising=False)
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_format(self):
        configure_logging(LoggingConfig(level=LogLevel.WARNING))
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        assert root.level == logging.WARNING

    def test_console_format(self):
        configure_logging(LoggingConfig(format=LogFormat.CONSOLE))
        assert isinstance(logging.getLogger().handlers[0].formatter, ConsoleFormatter)

    def test_quiets_sqlalchemy(self):
        configure_logging()
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("TRADEFLOW_LOG_LEVEL", "debug")
        monkeypatch.setenv("TRADEFLOW_LOG_FORMAT", "CONSOLE")
        config = configure_logging(LoggingConfig(exclude_paths=["/x"]))
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.CONSOLE
        assert config.exclude_paths == ["/x"]

    def test_invalid_env_values_ignored(self, monkeypatch):
        monkeypatch.setenv("TRADEFLOW_LOG_LEVEL", "LOUD")
        monkeypatch.setenv("TRADEFLOW_LOG_FORMAT", "xml")
        config = configure_logging()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.JSON


class TestLogPerformance:
    """Tests for the timing decorator."""

    def test_returns_result_and_logs_debug(self, caplog):
        @log_performance(threshold_ms=10_000, logger_name="perf.test")
        def work(x):
            return x * 2

        with caplog.at_level(logging.DEBUG, logger="perf.test"):
            assert work(21) == 42
        assert [r.levelno for r in caplog.records] == [logging.DEBUG]
        assert "work completed" in caplog.records[0].getMessage()

    def test_slow_call_logs_warning(self, caplog):
        @log_performance(threshold_ms=0, logger_name="perf.test")
        def slow():
            time.sleep(0.001)

        with caplog.at_level(logging.DEBUG, logger="perf.test"):
            slow()
        assert caplog.records[0].levelno == logging.WARNING
        assert "Slow operation" in caplog.records[0].getMessage()

    def test_failure_logs_error_once_and_reraises(self, caplog):
        @log_performance(logger_name="perf.test")
        def broken():
            raise KeyError("x")

        with caplog.at_level(logging.DEBUG, logger="perf.test"):
            with pytest.raises(KeyError):
                broken()
        assert [r.levelno for r in caplog.records] == [logging.ERROR]
        assert "KeyError" in caplog.records[0].getMessage()

    def test_preserves_metadata(self):
        @log_performance()
        def documented():
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."


class TestRequestTracingMiddleware:
    """Tests for request ID propagation over HTTP."""

    @pytest.fixture
    def client(self):
        app = FastAPI()
        app.add_middleware(RequestTracingMiddleware)

        @app.get("/ping")
        def ping():
            return {"request_id": get_request_id()}

        @app.get("/health")
        def health():
            return {"status": "ok"}

        return TestClient(app)

    def test_generates_request_id(self, client):
        response = client.get("/ping")
        header = response.headers[REQUEST_ID_HEADER]
        assert header
        assert response.json()["request_id"] == header

    def test_reuses_incoming_request_id(self, client):
        response = client.get("/ping", headers={REQUEST_ID_HEADER: "given-id"})
        assert response.headers[REQUEST_ID_HEADER] == "given-id"
        assert response.json()["request_id"] == "given-id"

    def test_logs_request(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="src.logging_config.middleware"):
            client.get("/ping")
        record = caplog.records[-1]
        assert record.getMessage() == "GET /ping -> 200"
        assert record.status_code == 200

    def test_excluded_path_not_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="src.logging_config.middleware"):
            response = client.get("/health")
        assert REQUEST_ID_HEADER in response.headers
        assert not [r for r in caplog.records if r.name == "src.logging_config.middleware"]

    def test_non_http_scope_passes_through(self):
        seen = []

        async def inner(scope, receive, send):
            seen.append(scope["type"])

        middleware = RequestTracingMiddleware(inner)
        asyncio.run(middleware({"type": "lifespan"}, None, None))
        assert seen == ["lifespan"]
