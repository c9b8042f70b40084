"""
Home Assistant MCP Server - Intelligence Tools

Anomaly scanning, automation suggestions and per-entity diagnostics built
on top of the heuristics in ha_mcp.intelligence.
"""

from datetime import datetime, timezone

import mcp.types as types

from ha_mcp.content import to_json, tool_result
from ha_mcp.homeassistant import HomeAssistantError, get_client, iso_hours_ago
from ha_mcp.intelligence import (
    UNAVAILABLE_STATES,
    detect_anomalies as scan_anomalies,
    detect_anomaly,
    generate_suggestions,
    get_entity_relationships,
)
from ha_mcp.logging_config import get_logger, send_log
from ha_tools.schemas import ANOMALY_ARRAY, DIAGNOSTICS, READ_ONLY, SUGGESTION_ARRAY


logger = get_logger("tools.intelligence")

INTELLIGENCE_TOOLS = [
    {
        "name": "detect_anomalies",
        "title": "Detect Anomalies",
        "description": "Scan all entities for potential anomalies like low batteries, unusual sensor readings, or devices in unexpected states.",
        "input_schema": {
            "type": "object",
            "properties": {
                "domain": {"type": "string", "description": "Limit scan to specific domain"},
            },
        },
        "output_schema": ANOMALY_ARRAY,
        "annotations": READ_ONLY,
    },
    {
        "name": "get_suggestions",
        "title": "Get Automation Suggestions",
        "description": "Get intelligent automation and optimization suggestions based on your current Home Assistant setup.",
        "input_schema": {"type": "object", "properties": {}},
        "output_schema": SUGGESTION_ARRAY,
        "annotations": READ_ONLY,
    },
    {
        "name": "diagnose_entity",
        "title": "Diagnose Entity",
        "description": "Run diagnostics on an entity to help troubleshoot issues. Checks state history, related entities, and common problems.",
        "input_schema": {
            "type": "object",
            "properties": {
                "entity_id": {"type": "string", "description": "Entity to diagnose"},
            },
            "required": ["entity_id"],
        },
        "output_schema": DIAGNOSTICS,
        "annotations": READ_ONLY,
    },
]


def detect_anomalies(domain: str | None = None) -> types.CallToolResult:
    """Scan entity states for anomalies."""
    anomalies = scan_anomalies(get_client().get_states(), domain)

    if not anomalies:
        return tool_result(
            "No anomalies detected. All entities appear to be operating normally.",
            audience=["user"],
            priority=0.9,
            structured=[],
        )

    return tool_result(
        f"Found {len(anomalies)} potential anomalies:\n\n{to_json(anomalies)}",
        audience=["user", "assistant"],
        priority=0.9,
        structured=anomalies,
    )


def get_suggestions() -> types.CallToolResult:
    """Suggest automations for the current setup."""
    suggestions = generate_suggestions(get_client().get_states())

    if not suggestions:
        return tool_result(
            "No suggestions at this time. Your Home Assistant setup looks well configured!",
            audience=["user"],
            priority=0.8,
            structured=[],
        )

    return tool_result(
        to_json(suggestions),
        audience=["user", "assistant"],
        priority=0.8,
        structured=suggestions,
    )


def run_diagnostics(entity_id: str) -> dict:
    """
    Collect diagnostic checks for an entity.

    Lookup failures are recorded as an "Entity Lookup" error check so a
    report is always produced.

    Args:
        entity_id: Entity to diagnose

    Returns:
        Diagnostics report with ``checks`` and, when available,
        ``current_state``, ``relationships`` and ``history_summary``
    """
    send_log("info", "diagnostics", {"action": "diagnose", "entity_id": entity_id})

    client = get_client()
    diagnostics = {
        "entity_id": entity_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": [],
    }
    checks = diagnostics["checks"]

    try:
        state = client.get_state(entity_id)
        diagnostics["current_state"] = state
        checks.append({"check": "Current State", "status": "ok", "details": state.get("state")})

        if state.get("state") in UNAVAILABLE_STATES:
            checks.append({
                "check": "Availability",
                "status": "warning",
                "details": f"Entity is {state.get('state')}. Check device connectivity.",
            })

        relationships = get_entity_relationships(client.get_states(), entity_id)
        diagnostics["relationships"] = relationships
        checks.append({
            "check": "Relationships",
            "status": "ok",
            "details": f"Found {len(relationships.get('related_entities') or [])} related entities",
        })

        history = client.get_history(entity_id, start_time=iso_hours_ago(24), minimal=True)
        if history and history[0] is not None:
            state_changes = len(history[0])
            diagnostics["history_summary"] = {
                "state_changes_24h": state_changes,
                "last_changed": state.get("last_changed"),
                "last_updated": state.get("last_updated"),
            }
            checks.append({
                "check": "Activity",
                "status": "info" if state_changes == 0 else "ok",
                "details": (
                    "No state changes in last 24 hours"
                    if state_changes == 0
                    else f"{state_changes} state changes in last 24 hours"
                ),
            })

        anomaly = detect_anomaly(state)
        if anomaly:
            checks.append({
                "check": "Anomaly Detection",
                "status": anomaly["severity"],
                "details": anomaly["reason"],
            })

    except HomeAssistantError as error:
        logger.warning(f"Diagnostics for {entity_id} incomplete: {error}")
        checks.append({"check": "Entity Lookup", "status": "error", "details": str(error)})

    return diagnostics


def diagnose_entity(entity_id: str) -> types.CallToolResult:
    """Run diagnostics on an entity."""
    diagnostics = run_diagnostics(entity_id)
    return tool_result(
        to_json(diagnostics),
        audience=["assistant"],
        priority=0.9,
        structured=diagnostics,
    )


def execute_intelligence_tool(tool_name: str, tool_input: dict) -> types.CallToolResult:
    """Execute an intelligence tool by name."""
    logger.debug(f"Executing intelligence tool: {tool_name}")

    if tool_name == "detect_anomalies":
        return detect_anomalies(domain=tool_input.get("domain"))

    elif tool_name == "get_suggestions":
        return get_suggestions()

    elif tool_name == "diagnose_entity":
        return diagnose_entity(entity_id=tool_input.get("entity_id", ""))

    else:
        raise ValueError(f"Unknown tool: {tool_name}")
