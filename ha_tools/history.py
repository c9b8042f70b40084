"""
Home Assistant MCP Server - History & Logbook Tools

Read-only access to recorded state history and the activity logbook.
"""

import mcp.types as types

from ha_mcp.content import to_json, tool_result
from ha_mcp.homeassistant import get_client
from ha_mcp.logging_config import get_logger
from ha_tools.schemas import READ_ONLY


logger = get_logger("tools.history")

HISTORY_TOOLS = [
    {
        "name": "get_history",
        "title": "Get Entity History",
        "description": "Get historical state data for entities. Essential for analyzing trends, debugging issues, or understanding patterns.",
        "input_schema": {
            "type": "object",
            "properties": {
                "entity_id": {
                    "type": "string",
                    "description": "Entity ID to get history for (required)",
                },
                "start_time": {
                    "type": "string",
                    "description": "Start time in ISO format (e.g., '2024-01-15T00:00:00'). Defaults to 24 hours ago.",
                },
                "end_time": {
                    "type": "string",
                    "description": "End time in ISO format. Defaults to now.",
                },
                "minimal": {
                    "type": "boolean",
                    "description": "If true, returns minimal response (faster, less data)",
                },
            },
            "required": ["entity_id"],
        },
        "annotations": READ_ONLY,
    },
    {
        "name": "get_logbook",
        "title": "Get Activity Logbook",
        "description": "Get logbook entries showing what happened in Home Assistant. Useful for understanding recent activity and debugging.",
        "input_schema": {
            "type": "object",
            "properties": {
                "entity_id": {"type": "string", "description": "Filter by specific entity"},
                "start_time": {"type": "string", "description": "Start time in ISO format. Defaults to 24 hours ago."},
                "end_time": {"type": "string", "description": "End time in ISO format. Defaults to now."},
            },
        },
        "annotations": READ_ONLY,
    },
]


def get_history(
    entity_id: str,
    start_time: str | None = None,
    end_time: str | None = None,
    minimal: bool = False,
) -> types.CallToolResult:
    """Get state history for one entity."""
    history = get_client().get_history(entity_id, start_time=start_time, end_time=end_time, minimal=minimal)
    return tool_result(to_json(history), audience=["assistant"], priority=0.7)


def get_logbook(
    entity_id: str | None = None,
    start_time: str | None = None,
    end_time: str | None = None,
) -> types.CallToolResult:
    """Get logbook entries, optionally for one entity."""
    logbook = get_client().get_logbook(start_time=start_time, entity_id=entity_id, end_time=end_time)
    return tool_result(to_json(logbook), audience=["assistant"], priority=0.7)


def execute_history_tool(tool_name: str, tool_input: dict) -> types.CallToolResult:
    """Execute a history tool by name."""
    logger.debug(f"Executing history tool: {tool_name}")

    if tool_name == "get_history":
        return get_history(
            entity_id=tool_input.get("entity_id", ""),
            start_time=tool_input.get("start_time"),
            end_time=tool_input.get("end_time"),
            minimal=bool(tool_input.get("minimal", False)),
        )

    elif tool_name == "get_logbook":
        return get_logbook(
            entity_id=tool_input.get("entity_id"),
            start_time=tool_input.get("start_time"),
            end_time=tool_input.get("end_time"),
        )

    else:
        raise ValueError(f"Unknown tool: {tool_name}")
