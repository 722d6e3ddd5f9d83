"""
Module: test_logger.py
Description: Unit tests for the structured logging configuration.
"""

import json
import logging

import pytest
import structlog

from hookrelay.utils import logger as logger_module
from hookrelay.utils.logger import PACKAGE_LOGGER, get_logger, set_log_level


@pytest.fixture(autouse=True)
def restore_level():
    yield
    set_log_level("INFO")


class TestLogLevel:
    """Test cases for the level threshold."""

    def test_set_log_level_applies_to_package_loggers(self):
        """Test the threshold is set on the package logger and inherited."""
        set_log_level("warning")

        assert logging.getLogger(PACKAGE_LOGGER).level == logging.WARNING
        assert not logging.getLogger("hookrelay.delivery.client").isEnabledFor(logging.INFO)
        assert logging.getLogger("hookrelay.delivery.client").isEnabledFor(logging.ERROR)

    def test_below_threshold_dropped(self):
        """Test structlog's level filter drops debug entries at INFO."""
        set_log_level("INFO")
        stdlib_logger = logging.getLogger("hookrelay.verification.engine")

        with pytest.raises(structlog.DropEvent):
            structlog.stdlib.filter_by_level(stdlib_logger, "debug", {"event": "noise"})

    def test_debug_enabled(self):
        """Test lowering the threshold lets debug entries through."""
        set_log_level("DEBUG")
        stdlib_logger = logging.getLogger("hookrelay.verification.engine")
        event_dict = {"event": "Webhook verified"}

        assert structlog.stdlib.filter_by_level(stdlib_logger, "debug", event_dict) is event_dict

    def test_unknown_level(self):
        """Test an unknown level name is refused."""
        with pytest.raises(ValueError):
            set_log_level("VERBOSE")


def test_level_and_timestamp_added():
    """Test the level and ISO 8601 UTC timestamp processors."""
    event_dict = logger_module._add_log_level(None, "info", {"event": "x"})
    event_dict = logger_module._add_timestamp(None, "info", event_dict)

    assert event_dict["level"] == "INFO"
    assert event_dict["timestamp"].endswith("Z")


def test_json_line_emitted(monkeypatch):
    """Test a package logger writes one JSON document with its context."""
    lines = []
    handler = logging.getLogger(PACKAGE_LOGGER).handlers[0]
    monkeypatch.setattr(handler, "emit", lambda record: lines.append(record.getMessage()))

    get_logger("hookrelay.tests").bind(message_id="msg_1").info("Webhook delivered", status_code=200)

    entry = json.loads(lines[-1])
    assert entry["event"] == "Webhook delivered"
    assert entry["message_id"] == "msg_1"
    assert entry["status_code"] == 200
    assert entry["level"] == "INFO"
    assert entry["logger"] == "hookrelay.tests"
