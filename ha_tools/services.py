"""
Home Assistant MCP Server - Service & Event Tools

Tools that act on Home Assistant: service calls and custom events, plus
the read-only service listing and template rendering.
"""

import mcp.types as types

from ha_mcp.content import to_json, tool_result
from ha_mcp.homeassistant import get_client
from ha_mcp.logging_config import get_logger, send_log
from ha_tools.schemas import READ_ONLY, SERVICE_CALL_RESULT


logger = get_logger("tools.services")

SERVICE_TOOLS = [
    {
        "name": "call_service",
        "title": "Call Home Assistant Service",
        "description": "Call a Home Assistant service to control devices or trigger actions. Use for turning on/off lights, running scripts, triggering automations, etc. THIS MODIFIES DEVICE STATE.",
        "input_schema": {
            "type": "object",
            "properties": {
                "domain": {
                    "type": "string",
                    "description": "Service domain (e.g., 'light', 'switch', 'automation', 'script', 'climate')",
                },
                "service": {
                    "type": "string",
                    "description": "Service name (e.g., 'turn_on', 'turn_off', 'toggle', 'trigger', 'set_temperature')",
                },
                "target": {
                    "type": "object",
                    "description": "Target for the service call",
                    "properties": {
                        "entity_id": {"type": ["string", "array"], "description": "Entity ID(s) to target"},
                        "area_id": {"type": ["string", "array"], "description": "Area ID(s) to target"},
                        "device_id": {"type": ["string", "array"], "description": "Device ID(s) to target"},
                    },
                },
                "data": {
                    "type": "object",
                    "description": "Additional service data (e.g., brightness: 255, color_temp: 400, temperature: 72)",
                },
            },
            "required": ["domain", "service"],
        },
        "output_schema": SERVICE_CALL_RESULT,
        "annotations": {"destructiveHint": True, "idempotentHint": False, "readOnlyHint": False},
    },
    {
        "name": "get_services",
        "title": "List Available Services",
        "description": "List available services, optionally filtered by domain. Shows what actions can be performed.",
        "input_schema": {
            "type": "object",
            "properties": {
                "domain": {
                    "type": "string",
                    "description": "Filter services by domain (e.g., 'light', 'climate')",
                },
            },
        },
        "annotations": READ_ONLY,
    },
    {
        "name": "fire_event",
        "title": "Fire Custom Event",
        "description": "Fire a custom event in Home Assistant. Can be used to trigger automations or communicate between systems.",
        "input_schema": {
            "type": "object",
            "properties": {
                "event_type": {
                    "type": "string",
                    "description": "Event type to fire (e.g., 'custom_event', 'my_notification')",
                },
                "event_data": {
                    "type": "object",
                    "description": "Optional data to include with the event",
                },
            },
            "required": ["event_type"],
        },
        "annotations": {"destructiveHint": True, "idempotentHint": False, "readOnlyHint": False},
    },
    {
        "name": "render_template",
        "title": "Render Jinja2 Template",
        "description": "Render a Jinja2 template using Home Assistant's template engine. Powerful for complex data extraction and formatting.",
        "input_schema": {
            "type": "object",
            "properties": {
                "template": {
                    "type": "string",
                    "description": "Jinja2 template (e.g., '{{ states(\"sensor.temperature\") }}', '{{ now() }}')",
                },
            },
            "required": ["template"],
        },
        "annotations": READ_ONLY,
    },
]


def _affected_entities(result) -> list[str]:
    """Entity IDs of the states a service call reported as changed."""
    if not isinstance(result, list):
        return []
    return [state["entity_id"] for state in result if isinstance(state, dict) and "entity_id" in state]


def call_service(
    domain: str, service: str, target: dict | None = None, data: dict | None = None
) -> types.CallToolResult:
    """
    Call a Home Assistant service.

    Args:
        domain: Service domain
        service: Service name
        target: entity_id/area_id/device_id targeting, merged into the payload
        data: Service data

    Returns:
        Tool result echoing the API response
    """
    send_log("notice", "ha-service", {"action": "call", "domain": domain, "service": service, "target": target})

    result = get_client().call_service(domain, service, data=data, target=target)

    return tool_result(
        f"Service {domain}.{service} called successfully.\n{to_json(result)}",
        audience=["user", "assistant"],
        priority=0.9,
        structured={
            "success": True,
            "domain": domain,
            "service": service,
            "affected_entities": _affected_entities(result),
        },
    )


def get_services(domain: str | None = None) -> types.CallToolResult:
    """List services, optionally for one domain."""
    services = get_client().get_services()
    if domain:
        services = [entry for entry in services if entry.get("domain") == domain]
    return tool_result(to_json(services), audience=["assistant"], priority=0.6)


def fire_event(event_type: str, event_data: dict | None = None) -> types.CallToolResult:
    """Fire a custom event."""
    send_log("notice", "ha-event", {"action": "fire", "event_type": event_type})
    get_client().fire_event(event_type, event_data)
    return tool_result(f"Event '{event_type}' fired successfully.", audience=["user"], priority=0.9)


def render_template(template: str) -> types.CallToolResult:
    """Render a Jinja2 template."""
    return tool_result(get_client().render_template(template), audience=["assistant"], priority=0.8)


def execute_service_tool(tool_name: str, tool_input: dict) -> types.CallToolResult:
    """
    Execute a service or event tool by name.

    Args:
        tool_name: Name of the tool
        tool_input: Tool input parameters

    Returns:
        Tool result
    """
    logger.debug(f"Executing service tool: {tool_name}")

    if tool_name == "call_service":
        return call_service(
            domain=tool_input.get("domain", ""),
            service=tool_input.get("service", ""),
            target=tool_input.get("target"),
            data=tool_input.get("data"),
        )

    elif tool_name == "get_services":
        return get_services(domain=tool_input.get("domain"))

    elif tool_name == "fire_event":
        return fire_event(
            event_type=tool_input.get("event_type", ""),
            event_data=tool_input.get("event_data"),
        )

    elif tool_name == "render_template":
        return render_template(template=tool_input.get("template", ""))

    else:
        raise ValueError(f"Unknown tool: {tool_name}")
