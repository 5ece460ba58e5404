"""Tests for the shared log line format.

Format: 2026-01-06T14:05:52Z [source] LEVEL message
"""

from __future__ import annotations

import io
import logging
import re
import sys
from datetime import datetime

import pytest

from honorflight.logging_config import (
    TRACE,
    HealthCheckFilter,
    ISO8601Formatter,
    configure_logging,
    get_logger,
)


def make_record(msg: str, level: int = logging.INFO, args: tuple = (), name: str = "test") -> logging.LogRecord:
    return logging.LogRecord(name=name, level=level, pathname="", lineno=0, msg=msg, args=args, exc_info=None)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestISO8601Formatter:
    def test_line_format(self):
        output = ISO8601Formatter(source="allocator").format(make_record("Added 5 veterans"))

        pattern = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z \[allocator\] INFO Added 5 veterans$"
        assert re.match(pattern, output), f"Output '{output}' doesn't match expected format"

    def test_timestamp_is_utc(self):
        timestamp = ISO8601Formatter(source="api").format(make_record("x")).split(" ")[0]

        assert timestamp.endswith("Z")
        assert datetime.fromisoformat(timestamp.replace("Z", "+00:00")) is not None

    @pytest.mark.parametrize(
        "level, level_name",
        [
            (TRACE, "TRACE"),
            (logging.DEBUG, "DEBUG"),
            (logging.WARNING, "WARNING"),
            (logging.ERROR, "ERROR"),
        ],
    )
    def test_level_names(self, level, level_name):
        output = ISO8601Formatter(source="api").format(make_record("Message", level=level))
        assert f"[api] {level_name} Message" in output

    def test_percent_args_are_applied(self):
        output = ISO8601Formatter().format(make_record("Guardian %s paired %d", args=("g1", 2)))
        assert output.endswith("[app] INFO Guardian g1 paired 2")

    def test_exception_text_is_appended(self):
        try:
            raise RuntimeError("store down")
        except RuntimeError:
            record = make_record("Request failed", level=logging.ERROR)
            record.exc_info = sys.exc_info()

        output = ISO8601Formatter(source="api").format(record)

        assert "ERROR Request failed\nTraceback" in output
        assert "RuntimeError: store down" in output


class TestHealthCheckFilter:
    def test_health_access_lines_suppressed(self):
        record = make_record('127.0.0.1:56948 - "GET /health HTTP/1.1" 200 OK', name="uvicorn.access")
        assert HealthCheckFilter().filter(record) is False

    def test_other_endpoints_pass(self):
        record = make_record('127.0.0.1:56948 - "GET /api/waitlist HTTP/1.1" 200 OK', name="uvicorn.access")
        assert HealthCheckFilter().filter(record) is True

    def test_health_passes_at_debug(self):
        record = make_record('127.0.0.1:56948 - "GET /health HTTP/1.1" 200 OK', level=logging.DEBUG)
        assert HealthCheckFilter().filter(record) is True


class TestConfigureLogging:
    def test_default_level_is_info(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert configure_logging(source="test").level == logging.INFO

    def test_debug_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert configure_logging(source="test").level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        assert configure_logging(source="test").level == logging.INFO

    def test_trace_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "trace")
        assert configure_logging(source="test").level == TRACE

    def test_httpx_request_lines_are_quieted(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        configure_logging(source="test")
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_single_handler_installed(self):
        configure_logging(source="test")
        configure_logging(source="test")
        assert len(logging.getLogger().handlers) == 1

    def test_trace_lines_use_shared_format(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        configure_logging(source="trace_test", level=TRACE)
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(ISO8601Formatter(source="trace_test"))
        root = logging.getLogger()
        root.handlers.clear()
        root.addHandler(handler)

        get_logger("honorflight.store.client").log(TRACE, "GET /honorflight/_design/basic/_view/flight_assignment")

        assert re.match(
            r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z \[trace_test\] TRACE GET /honorflight/_design/basic/_view/flight_assignment\n$",
            stream.getvalue(),
        )
