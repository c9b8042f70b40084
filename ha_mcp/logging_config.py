"""
Home Assistant MCP Server - Centralized Logging Module

Provides consistent logging configuration across all components.

Stdout carries the MCP protocol stream, so console output goes to stderr as
one JSON object per line. The MCP ``logging/setLevel`` request adjusts the
single process-wide log level kept here.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any

from ha_mcp.config import LOG_FILE, LOG_LEVEL


PACKAGE_LOGGER = "ha_mcp"

# Syslog severities used by MCP, lowest first
MCP_LOG_LEVELS = ["debug", "info", "notice", "warning", "error", "critical", "alert", "emergency"]

NOTICE = 25
ALERT = 55
EMERGENCY = 60

logging.addLevelName(NOTICE, "NOTICE")
logging.addLevelName(ALERT, "ALERT")
logging.addLevelName(EMERGENCY, "EMERGENCY")

MCP_TO_PYTHON_LEVEL = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "notice": NOTICE,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "alert": ALERT,
    "emergency": EMERGENCY,
}

# Log format strings
DETAILED_FORMAT = "%(asctime)s | %(levelname)-9s | %(name)-25s | %(funcName)-20s | %(message)s"

_current_level = LOG_LEVEL if LOG_LEVEL in MCP_LOG_LEVELS else "info"


def get_log_level(level_name: str) -> int:
    """
    Convert a log level name to a logging constant.

    Accepts both MCP names (notice, alert, ...) and the standard Python
    names, case-insensitively. Unknown names map to INFO.
    """
    return MCP_TO_PYTHON_LEVEL.get(level_name.lower(), logging.INFO)


def to_mcp_level(levelno: int) -> str:
    """Return the highest MCP level name not above a Python level number."""
    name = "debug"
    for mcp_level in MCP_LOG_LEVELS:
        if MCP_TO_PYTHON_LEVEL[mcp_level] <= levelno:
            name = mcp_level
    return name


class JsonLineFormatter(logging.Formatter):
    """Render records as ``{"type": "log", level, logger, data, timestamp}``."""

    def format(self, record: logging.LogRecord) -> str:
        logger_name = record.name
        if logger_name.startswith(f"{PACKAGE_LOGGER}."):
            logger_name = logger_name[len(PACKAGE_LOGGER) + 1:]

        data = record.msg if isinstance(record.msg, dict) else record.getMessage()
        if record.exc_info and not isinstance(data, dict):
            data = f"{data}\n{self.formatException(record.exc_info)}"

        payload = {
            "type": "log",
            "level": to_mcp_level(record.levelno),
            "logger": logger_name,
            "data": data,
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
        }
        return json.dumps(payload, default=str)


def setup_logging(
    name: str | None = None,
    level: str | None = None,
    log_to_file: bool = True,
    log_to_console: bool = True,
) -> logging.Logger:
    """
    Set up logging for the package logger.

    Args:
        name: Logger name (defaults to the package logger)
        level: Log level override (defaults to the current MCP level)
        log_to_file: Enable file logging when LOG_FILE is configured
        log_to_console: Enable stderr logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name or PACKAGE_LOGGER)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(get_log_level(level or _current_level))
    logger.propagate = False

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(JsonLineFormatter())
        logger.addHandler(console_handler)

    # Rotating file handler, 5MB max, keep 5 backups
    if log_to_file and LOG_FILE:
        file_handler = RotatingFileHandler(
            LOG_FILE,
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a component.

    Every component logger lives under the package logger so that a single
    ``set_log_level`` call governs all of them.

    Example:
        from ha_mcp.logging_config import get_logger
        logger = get_logger("ha-api")
        logger.info("Starting request")
    """
    setup_logging()

    if name != PACKAGE_LOGGER and not name.startswith(f"{PACKAGE_LOGGER}."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def get_current_log_level() -> str:
    """Return the current MCP log level name."""
    return _current_level


def set_log_level(level: str) -> None:
    """
    Change the process-wide MCP log level.

    Raises:
        ValueError: If the level is not one of MCP_LOG_LEVELS
    """
    global _current_level

    if level not in MCP_LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}")

    _current_level = level
    setup_logging().setLevel(MCP_TO_PYTHON_LEVEL[level])


def should_log(level: str) -> bool:
    """Return True if a message at ``level`` passes the current threshold."""
    if level not in MCP_LOG_LEVELS:
        return False
    return MCP_LOG_LEVELS.index(level) >= MCP_LOG_LEVELS.index(_current_level)


def send_log(level: str, logger_name: str, data: dict[str, Any]) -> None:
    """
    Emit a structured log event.

    Args:
        level: MCP level name
        logger_name: Component name (e.g. "ha-api", "mcp-server", "docs")
        data: Event payload, conventionally with an "action" key
    """
    if should_log(level):
        get_logger(logger_name).log(MCP_TO_PYTHON_LEVEL[level], data)
