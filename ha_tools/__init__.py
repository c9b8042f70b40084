"""Home Assistant MCP Server - Tools Package

This package contains all tools exposed by the MCP server:
- states.py: Entity states, search and relationship details
- services.py: Service calls, service listing, events and templates
- history.py: State history and the logbook
- configuration.py: Core config, areas, devices, config check, error log
- calendars.py: Calendar entities and events
- intelligence.py: Anomaly detection, suggestions and entity diagnostics
- documentation.py: Integration docs, breaking changes, syntax checking
"""

import mcp.types as types

from ha_mcp.content import error_result
from ha_mcp.logging_config import get_logger, send_log
from ha_tools.calendars import CALENDAR_TOOLS, execute_calendar_tool
from ha_tools.configuration import CONFIGURATION_TOOLS, execute_configuration_tool
from ha_tools.documentation import DOCUMENTATION_TOOLS, execute_documentation_tool
from ha_tools.history import HISTORY_TOOLS, execute_history_tool
from ha_tools.intelligence import INTELLIGENCE_TOOLS, execute_intelligence_tool
from ha_tools.services import SERVICE_TOOLS, execute_service_tool
from ha_tools.states import STATE_TOOLS, execute_state_tool


logger = get_logger("tools")

# Listing order
ALL_TOOLS = (
    STATE_TOOLS
    + SERVICE_TOOLS[:2]
    + HISTORY_TOOLS
    + CONFIGURATION_TOOLS
    + SERVICE_TOOLS[2:]
    + CALENDAR_TOOLS
    + INTELLIGENCE_TOOLS
    + DOCUMENTATION_TOOLS
)

_EXECUTORS = [
    (STATE_TOOLS, execute_state_tool),
    (SERVICE_TOOLS, execute_service_tool),
    (HISTORY_TOOLS, execute_history_tool),
    (CONFIGURATION_TOOLS, execute_configuration_tool),
    (CALENDAR_TOOLS, execute_calendar_tool),
    (INTELLIGENCE_TOOLS, execute_intelligence_tool),
    (DOCUMENTATION_TOOLS, execute_documentation_tool),
]


def find_tool(tool_name: str) -> dict | None:
    """Return the definition of a tool, or None if there is no such tool."""
    return next((tool for tool in ALL_TOOLS if tool["name"] == tool_name), None)


def execute_tool(tool_name: str, tool_input: dict | None) -> types.CallToolResult:
    """
    Execute a tool and return its MCP result.

    Failures never propagate: they are logged and returned as an error
    result so the client sees the message.

    Args:
        tool_name: Name of the tool to execute
        tool_input: Tool input parameters

    Returns:
        Tool result
    """
    logger.info(f"Executing tool: {tool_name}")
    tool_input = tool_input or {}

    try:
        for tools, executor in _EXECUTORS:
            if tool_name in [tool["name"] for tool in tools]:
                return executor(tool_name, tool_input)
        raise ValueError(f"Unknown tool: {tool_name}")

    except Exception as error:
        send_log("error", "mcp-server", {"action": "tool_error", "tool": tool_name, "error": str(error)})
        return error_result(str(error))


__all__ = [
    "ALL_TOOLS",
    "CALENDAR_TOOLS",
    "CONFIGURATION_TOOLS",
    "DOCUMENTATION_TOOLS",
    "HISTORY_TOOLS",
    "INTELLIGENCE_TOOLS",
    "SERVICE_TOOLS",
    "STATE_TOOLS",
    "execute_tool",
    "find_tool",
]
