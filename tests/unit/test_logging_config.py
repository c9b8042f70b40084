"""
Tests for ha_mcp/logging_config.py - Centralized Logging Module

These tests cover level conversion, the process-wide MCP level, the JSON
line formatter and structured log emission.
"""

import json
import logging
from unittest.mock import patch

import pytest

from ha_mcp import logging_config
from ha_mcp.logging_config import (
    ALERT,
    DETAILED_FORMAT,
    EMERGENCY,
    MCP_LOG_LEVELS,
    NOTICE,
    JsonLineFormatter,
    get_current_log_level,
    get_log_level,
    get_logger,
    send_log,
    set_log_level,
    setup_logging,
    should_log,
    to_mcp_level,
)


# =============================================================================
# Log Level Tests
# =============================================================================


class TestGetLogLevel:
    """Tests for the get_log_level function."""

    def test_standard_levels(self):
        assert get_log_level("debug") == logging.DEBUG
        assert get_log_level("info") == logging.INFO
        assert get_log_level("warning") == logging.WARNING
        assert get_log_level("error") == logging.ERROR
        assert get_log_level("critical") == logging.CRITICAL

    def test_mcp_levels(self):
        assert get_log_level("notice") == NOTICE
        assert get_log_level("alert") == ALERT
        assert get_log_level("emergency") == EMERGENCY

    def test_case_insensitive(self):
        assert get_log_level("DEBUG") == logging.DEBUG
        assert get_log_level("Notice") == NOTICE

    def test_unknown_level_defaults_to_info(self):
        assert get_log_level("TRACE") == logging.INFO
        assert get_log_level("") == logging.INFO

    def test_custom_level_names_registered(self):
        assert logging.getLevelName(NOTICE) == "NOTICE"
        assert logging.getLevelName(EMERGENCY) == "EMERGENCY"

    @pytest.mark.parametrize("levelno, expected", [
        (logging.DEBUG, "debug"),
        (logging.INFO, "info"),
        (NOTICE, "notice"),
        (logging.WARNING, "warning"),
        (ALERT, "alert"),
        (5, "debug"),
    ])
    def test_to_mcp_level(self, levelno, expected):
        assert to_mcp_level(levelno) == expected


class TestCurrentLevel:
    """Tests for the process-wide MCP log level."""

    def test_default_is_info(self):
        assert get_current_log_level() == "info"

    def test_set_log_level(self):
        set_log_level("error")

        assert get_current_log_level() == "error"
        assert logging.getLogger("ha_mcp").level == logging.ERROR

    def test_invalid_level_raises(self):
        with pytest.raises(ValueError, match="Invalid log level: verbose"):
            set_log_level("verbose")

        assert get_current_log_level() == "info"

    def test_should_log_threshold(self):
        set_log_level("warning")

        assert should_log("warning") is True
        assert should_log("emergency") is True
        assert should_log("notice") is False
        assert should_log("debug") is False

    def test_should_log_unknown_level(self):
        assert should_log("chatty") is False

    def test_levels_are_ordered(self):
        assert MCP_LOG_LEVELS[0] == "debug"
        assert MCP_LOG_LEVELS[-1] == "emergency"


# =============================================================================
# Setup Logging Tests
# =============================================================================


class TestSetupLogging:
    """Tests for logger setup."""

    def test_setup_returns_logger(self):
        logger = setup_logging("test_setup_returns_logger", log_to_file=False)

        assert isinstance(logger, logging.Logger)
        assert logger.propagate is False

    def test_console_handler_writes_json_to_stderr(self):
        logger = setup_logging("test_console_handler", log_to_file=False)

        handler = logger.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert isinstance(handler.formatter, JsonLineFormatter)

    def test_handlers_not_duplicated(self):
        logger = setup_logging("test_no_duplicates", log_to_file=False)
        count = len(logger.handlers)

        setup_logging("test_no_duplicates", log_to_file=False)

        assert len(logger.handlers) == count

    def test_file_handler_when_log_file_set(self, tmp_path):
        log_file = tmp_path / "mcp.log"

        with patch.object(logging_config, "LOG_FILE", str(log_file)):
            logger = setup_logging("test_file_handler", log_to_console=False)

        handler = logger.handlers[0]
        assert isinstance(handler, logging.handlers.RotatingFileHandler)
        assert handler.maxBytes == 5 * 1024 * 1024
        assert handler.formatter._fmt == DETAILED_FORMAT
        handler.close()

    def test_get_logger_prefixes_package(self):
        assert get_logger("ha-api").name == "ha_mcp.ha-api"
        assert get_logger("ha_mcp.docs").name == "ha_mcp.docs"


# =============================================================================
# Formatter and Emission Tests
# =============================================================================


class TestJsonLineFormatter:
    def make_record(self, msg, name="ha_mcp.ha-api", level=logging.INFO):
        return logging.LogRecord(name, level, __file__, 1, msg, None, None)

    def test_dict_message(self):
        line = JsonLineFormatter().format(self.make_record({"action": "request", "endpoint": "/states"}))
        payload = json.loads(line)

        assert payload["type"] == "log"
        assert payload["level"] == "info"
        assert payload["logger"] == "ha-api"
        assert payload["data"] == {"action": "request", "endpoint": "/states"}
        assert payload["timestamp"].endswith("+00:00")

    def test_text_message(self):
        payload = json.loads(JsonLineFormatter().format(self.make_record("plain text", level=NOTICE)))

        assert payload["data"] == "plain text"
        assert payload["level"] == "notice"


class TestSendLog:
    def test_emits_through_component_logger(self):
        with patch.object(logging.getLogger("ha_mcp.docs"), "log") as mock_log:
            send_log("warning", "docs", {"action": "fetch_error"})

        mock_log.assert_called_once_with(logging.WARNING, {"action": "fetch_error"})

    def test_below_threshold_is_dropped(self):
        with patch.object(logging.getLogger("ha_mcp.docs"), "log") as mock_log:
            send_log("debug", "docs", {"action": "fetch"})

        mock_log.assert_not_called()
