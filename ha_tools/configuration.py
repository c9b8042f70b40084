"""
Home Assistant MCP Server - Configuration Tools

Core configuration, the area and device registries, configuration
validation and the error log.
"""

import json

import mcp.types as types

from ha_mcp.content import to_json, tool_result
from ha_mcp.homeassistant import get_client
from ha_mcp.logging_config import get_logger
from ha_tools.schemas import AREA_ARRAY, CONFIG_VALIDATION, READ_ONLY


logger = get_logger("tools.configuration")

DEFAULT_LOG_LINES = 100

CONFIGURATION_TOOLS = [
    {
        "name": "get_config",
        "title": "Get Home Assistant Configuration",
        "description": "Get Home Assistant configuration including location, units, version, and loaded components.",
        "input_schema": {"type": "object", "properties": {}},
        "annotations": READ_ONLY,
    },
    {
        "name": "get_areas",
        "title": "List All Areas",
        "description": "List all areas defined in Home Assistant with their IDs and names.",
        "input_schema": {"type": "object", "properties": {}},
        "output_schema": AREA_ARRAY,
        "annotations": READ_ONLY,
    },
    {
        "name": "get_devices",
        "title": "List Devices",
        "description": "List devices registered in Home Assistant, optionally filtered by area.",
        "input_schema": {
            "type": "object",
            "properties": {
                "area_id": {"type": "string", "description": "Filter devices by area ID"},
            },
        },
        "annotations": READ_ONLY,
    },
    {
        "name": "validate_config",
        "title": "Validate Configuration",
        "description": "Validate Home Assistant configuration files. Run this before restarting to catch errors.",
        "input_schema": {"type": "object", "properties": {}},
        "output_schema": CONFIG_VALIDATION,
        "annotations": READ_ONLY,
    },
    {
        "name": "get_error_log",
        "title": "Get Error Log",
        "description": "Get the Home Assistant error log. Useful for debugging issues.",
        "input_schema": {
            "type": "object",
            "properties": {
                "lines": {"type": "number", "description": "Number of lines to return (default: 100)"},
            },
        },
        "annotations": READ_ONLY,
    },
]


def get_config() -> types.CallToolResult:
    """Get the core configuration."""
    return tool_result(to_json(get_client().get_config()), audience=["assistant"], priority=0.6)


def get_areas() -> types.CallToolResult:
    """List areas as rendered by the template engine."""
    rendered = get_client().get_areas()

    try:
        areas = json.loads(rendered)
    except ValueError:
        logger.debug("Area template did not render JSON")
        areas = None

    return tool_result(
        rendered,
        audience=["assistant"],
        priority=0.7,
        structured=areas if isinstance(areas, list) else [],
    )


def get_devices(area_id: str | None = None) -> types.CallToolResult:
    """List device IDs, optionally for one area."""
    return tool_result(get_client().get_devices(area_id), audience=["assistant"], priority=0.6)


def validate_config() -> types.CallToolResult:
    """Run the Home Assistant configuration check."""
    result = get_client().check_config()
    return tool_result(
        to_json(result),
        audience=["user", "assistant"],
        priority=0.9,
        structured=result if isinstance(result, dict) else {"result": "invalid", "errors": str(result)},
    )


def get_error_log(lines: int | None = None) -> types.CallToolResult:
    """
    Get the tail of the error log.

    Args:
        lines: Number of trailing lines to return (default 100)

    Returns:
        Tool result with the selected log lines
    """
    lines = int(lines or DEFAULT_LOG_LINES)
    log_lines = get_client().get_error_log().split("\n")
    return tool_result("\n".join(log_lines[-lines:]), audience=["assistant"], priority=0.8)


def execute_configuration_tool(tool_name: str, tool_input: dict) -> types.CallToolResult:
    """Execute a configuration tool by name."""
    logger.debug(f"Executing configuration tool: {tool_name}")

    if tool_name == "get_config":
        return get_config()

    elif tool_name == "get_areas":
        return get_areas()

    elif tool_name == "get_devices":
        return get_devices(area_id=tool_input.get("area_id"))

    elif tool_name == "validate_config":
        return validate_config()

    elif tool_name == "get_error_log":
        return get_error_log(lines=tool_input.get("lines"))

    else:
        raise ValueError(f"Unknown tool: {tool_name}")
