"""
Home Assistant MCP Server - Calendar Tools
"""

import mcp.types as types

from ha_mcp.content import to_json, tool_result
from ha_mcp.homeassistant import get_client
from ha_mcp.logging_config import get_logger
from ha_tools.schemas import READ_ONLY


logger = get_logger("tools.calendars")

CALENDAR_TOOLS = [
    {
        "name": "get_calendars",
        "title": "List Calendars",
        "description": "List all calendar entities in Home Assistant.",
        "input_schema": {"type": "object", "properties": {}},
        "annotations": READ_ONLY,
    },
    {
        "name": "get_calendar_events",
        "title": "Get Calendar Events",
        "description": "Get events from a specific calendar within a time range.",
        "input_schema": {
            "type": "object",
            "properties": {
                "calendar_entity": {"type": "string", "description": "Calendar entity ID (e.g., 'calendar.family')"},
                "start": {"type": "string", "description": "Start time in ISO format"},
                "end": {"type": "string", "description": "End time in ISO format"},
            },
            "required": ["calendar_entity"],
        },
        "annotations": READ_ONLY,
    },
]


def get_calendars() -> types.CallToolResult:
    """List calendar entities."""
    return tool_result(to_json(get_client().get_calendars()), audience=["assistant"], priority=0.6)


def get_calendar_events(
    calendar_entity: str, start: str | None = None, end: str | None = None
) -> types.CallToolResult:
    """Get events for one calendar, by default for the next seven days."""
    events = get_client().get_calendar_events(calendar_entity, start=start, end=end)
    return tool_result(to_json(events), audience=["assistant"], priority=0.7)


def execute_calendar_tool(tool_name: str, tool_input: dict) -> types.CallToolResult:
    """Execute a calendar tool by name."""
    logger.debug(f"Executing calendar tool: {tool_name}")

    if tool_name == "get_calendars":
        return get_calendars()

    elif tool_name == "get_calendar_events":
        return get_calendar_events(
            calendar_entity=tool_input.get("calendar_entity", ""),
            start=tool_input.get("start"),
            end=tool_input.get("end"),
        )

    else:
        raise ValueError(f"Unknown tool: {tool_name}")
