"""
Centralized logging configuration for the Honor Flight services.

Provides one log line format across the API and the allocation core:
Format: 2026-01-06T14:05:52Z [source] LEVEL message

Environment Variables:
    LOG_LEVEL: Set to "DEBUG", "TRACE", or "INFO" (default)
               - INFO: Normal operation logs (batch summaries, fallbacks)
               - DEBUG: Per-document diagnostics
               - TRACE: Store request/view parameters

Usage:
    from honorflight.logging_config import configure_logging, get_logger

    configure_logging(source="api")
    logger = get_logger(__name__)
    logger.info("Application started")
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime

# Below DEBUG; the store client logs every request it sends at this level
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LEVELS_BY_NAME = {"TRACE": TRACE, "DEBUG": logging.DEBUG, "INFO": logging.INFO}

# Loggers whose per-request lines repeat what the store client already logs
QUIET_LOGGERS = ("httpx", "httpcore")


class ISO8601Formatter(logging.Formatter):
    """Formatter producing ISO8601 timestamps in UTC.

    Output format: 2026-01-06T14:05:52Z [source] LEVEL message
    """

    def __init__(self, source: str = "app"):
        """Initialize formatter with a source identifier.

        Args:
            source: Identifier shown in brackets (e.g., "api", "allocator")
        """
        self.source = source
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record with ISO8601 UTC timestamp."""
        timestamp = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        message = record.getMessage()

        # Tracebacks go on the lines after the message
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        return f"{timestamp} [{self.source}] {record.levelname} {message}"


class HealthCheckFilter(logging.Filter):
    """Suppress access log lines for the health endpoint unless at DEBUG.

    Load balancers and the container runtime poll /health every few seconds.
    """

    HEALTH_PATH = "/health"

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == logging.DEBUG:
            return True

        message = record.getMessage()
        return not (self.HEALTH_PATH in message and ("GET" in message or "200" in message))


def level_from_env() -> int:
    """LOG_LEVEL as a logging level; unknown or unset values mean INFO."""
    return LEVELS_BY_NAME.get(os.getenv("LOG_LEVEL", "").upper(), logging.INFO)


def configure_logging(source: str = "app", level: int | None = None) -> logging.Logger:
    """Install the shared stdout handler on the root and uvicorn loggers.

    Safe to call more than once: earlier handlers are replaced, not stacked.

    Args:
        source: Source identifier for log messages (e.g., "api", "allocator")
        level: Logging level (defaults to LOG_LEVEL, else INFO)

    Returns:
        Configured root logger
    """
    if level is None:
        level = level_from_env()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ISO8601Formatter(source=source))
    handler.addFilter(HealthCheckFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Uvicorn installs its own handlers, which would bypass HealthCheckFilter
    for uvicorn_logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(uvicorn_logger_name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.addHandler(handler)
        uvicorn_logger.setLevel(level)
        uvicorn_logger.propagate = False

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given module name."""
    return logging.getLogger(name)
