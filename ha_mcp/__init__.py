"""
Home Assistant MCP Server - Core Package

Home Assistant REST client, intelligence layer, documentation helpers and
the MCP protocol wiring.
"""

from ha_mcp.config import SERVER_NAME, SERVER_VERSION, validate_config
from ha_mcp.logging_config import get_logger, send_log, setup_logging


__all__ = [
    "SERVER_NAME",
    "SERVER_VERSION",
    "get_logger",
    "send_log",
    "setup_logging",
    "validate_config",
]
