"""
Module: logger.py
Description: Structured logging configuration for HookRelay.

Configures structlog for JSON output so log lines can be shipped to
CloudWatch Logs (or any JSON log collector) unchanged. Provides
consistent logging across all modules with proper context and
structured data.

Key Components:
- JSON output for CloudWatch compatibility
- stdlib-backed loggers filtered by structlog.stdlib.filter_by_level
- set_log_level() to apply the configured threshold at startup
- get_logger() helper function

Dependencies: structlog, datetime, logging
Author: HookRelay Team
"""

import logging
import sys
from datetime import datetime, timezone

import structlog

PACKAGE_LOGGER = "hookrelay"


def _add_timestamp(logger, method_name, event_dict):
    """
    Add ISO 8601 timestamp to log entries.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with timestamp
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    """Add log level to event dictionary."""
    event_dict["level"] = method_name.upper()
    return event_dict


def _configure_package_logger() -> None:
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(handler)
        package_logger.propagate = False
    package_logger.setLevel(logging.INFO)


_configure_package_logger()

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        _add_timestamp,
        _add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)


def set_log_level(level: str) -> None:
    """
    Set the minimum level emitted by HookRelay loggers.

    Args:
        level: Standard level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Raises:
        ValueError: If level is not a known level name
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.getLogger(PACKAGE_LOGGER).setLevel(numeric_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Webhook delivered", message_id="msg_123", status_code=200)
        {"message_id": "msg_123", "status_code": 200, "event": "Webhook delivered", "logger": "hookrelay...", "timestamp": "...", "level": "INFO"}
    """
    return structlog.get_logger(name)
