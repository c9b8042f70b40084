"""
Home Assistant MCP Server - Resources

Read-only views of Home Assistant addressed by ``ha://`` URIs: nine fixed
resources and four URI templates.
"""

from __future__ import annotations

import re

import mcp.types as types
from mcp.server.lowlevel.helper_types import ReadResourceContents

from ha_mcp.content import to_json
from ha_mcp.homeassistant import get_client, iso_hours_ago
from ha_mcp.intelligence import (
    detect_anomaly,
    filter_by_domain,
    generate_state_summary,
    generate_suggestions,
    get_entity_relationships,
    simplify_state,
)
from ha_mcp.logging_config import get_logger


logger = get_logger("resources")

JSON = "application/json"
MARKDOWN = "text/markdown"

RESOURCES = [
    types.Resource(
        uri="ha://states/summary",
        name="state_summary",
        title="State Summary",
        description="Human-readable summary of all Home Assistant entity states",
        mimeType=MARKDOWN,
    ),
    types.Resource(
        uri="ha://automations",
        name="automations",
        title="Automations List",
        description="List of all automations with their current state and last triggered time",
        mimeType=JSON,
    ),
    types.Resource(
        uri="ha://scripts",
        name="scripts",
        title="Scripts List",
        description="List of all scripts available in Home Assistant",
        mimeType=JSON,
    ),
    types.Resource(
        uri="ha://scenes",
        name="scenes",
        title="Scenes List",
        description="List of all scenes that can be activated",
        mimeType=JSON,
    ),
    types.Resource(
        uri="ha://areas",
        name="areas",
        title="Areas List",
        description="All areas defined in Home Assistant with associated entities",
        mimeType=JSON,
    ),
    types.Resource(
        uri="ha://config",
        name="config",
        title="HA Configuration",
        description="Home Assistant configuration details",
        mimeType=JSON,
    ),
    types.Resource(
        uri="ha://integrations",
        name="integrations",
        title="Loaded Integrations",
        description="List of loaded integrations/components",
        mimeType=JSON,
    ),
    types.Resource(
        uri="ha://anomalies",
        name="anomalies",
        title="Detected Anomalies",
        description="Currently detected anomalies and potential issues",
        mimeType=JSON,
    ),
    types.Resource(
        uri="ha://suggestions",
        name="suggestions",
        title="Automation Suggestions",
        description="Automation and optimization suggestions",
        mimeType=JSON,
    ),
]

RESOURCE_TEMPLATES = [
    types.ResourceTemplate(
        uriTemplate="ha://states/{domain}",
        name="states_by_domain",
        title="States by Domain",
        description="Get all entity states for a specific domain (e.g., light, switch, sensor)",
        mimeType=JSON,
    ),
    types.ResourceTemplate(
        uriTemplate="ha://entity/{entity_id}",
        name="entity_details",
        title="Entity Details",
        description="Detailed information about a specific entity",
        mimeType=JSON,
    ),
    types.ResourceTemplate(
        uriTemplate="ha://area/{area_id}",
        name="area_details",
        title="Area Details",
        description="All entities and devices in a specific area",
        mimeType=JSON,
    ),
    types.ResourceTemplate(
        uriTemplate="ha://history/{entity_id}",
        name="entity_history",
        title="Entity History",
        description="Recent state history for an entity (last 24 hours)",
        mimeType=JSON,
    ),
]

STATES_BY_DOMAIN_URI = re.compile(r"^ha://states/(\w+)$")
ENTITY_URI = re.compile(r"^ha://entity/(.+)$")
AREA_URI = re.compile(r"^ha://area/(.+)$")
HISTORY_URI = re.compile(r"^ha://history/(.+)$")


def _friendly_name(state: dict):
    return (state.get("attributes") or {}).get("friendly_name")


# =============================================================================
# Fixed resources
# =============================================================================


def _state_summary() -> str:
    return generate_state_summary(get_client().get_states())


def _automations() -> list[dict]:
    return [
        {
            "entity_id": state["entity_id"],
            "friendly_name": _friendly_name(state),
            "state": state.get("state"),
            "last_triggered": (state.get("attributes") or {}).get("last_triggered"),
        }
        for state in filter_by_domain(get_client().get_states(), "automation")
    ]


def _scripts() -> list[dict]:
    return [
        {"entity_id": state["entity_id"], "friendly_name": _friendly_name(state), "state": state.get("state")}
        for state in filter_by_domain(get_client().get_states(), "script")
    ]


def _scenes() -> list[dict]:
    return [
        {"entity_id": state["entity_id"], "friendly_name": _friendly_name(state)}
        for state in filter_by_domain(get_client().get_states(), "scene")
    ]


def _anomalies() -> list:
    states = get_client().get_states()
    return [anomaly for anomaly in map(detect_anomaly, states) if anomaly]


def _integrations() -> list:
    return get_client().get_config().get("components") or []


# uri -> (mime type, reader); JSON readers return data, markdown/text readers return str
FIXED_READERS = {
    "ha://states/summary": (MARKDOWN, _state_summary),
    "ha://automations": (JSON, _automations),
    "ha://scripts": (JSON, _scripts),
    "ha://scenes": (JSON, _scenes),
    "ha://areas": (JSON, lambda: get_client().get_areas()),
    "ha://config": (JSON, lambda: get_client().get_config()),
    "ha://integrations": (JSON, _integrations),
    "ha://anomalies": (JSON, _anomalies),
    "ha://suggestions": (JSON, lambda: generate_suggestions(get_client().get_states())),
}


# =============================================================================
# Templated resources
# =============================================================================


def _states_by_domain(domain: str) -> list[dict]:
    return [simplify_state(state) for state in filter_by_domain(get_client().get_states(), domain)]


def _area_details(area_id: str) -> dict:
    client = get_client()
    area_entities = [
        state for state in client.get_states()
        if (state.get("attributes") or {}).get("area_id") == area_id
    ]
    return {
        "area_id": area_id,
        "area_name": client.get_area_name(area_id),
        "entities": [
            {"entity_id": state["entity_id"], "state": state.get("state"), "friendly_name": _friendly_name(state)}
            for state in area_entities
        ],
    }


def _entity_history(entity_id: str):
    """Last 24 hours of minimal history for an entity."""
    return get_client().get_history(entity_id, start_time=iso_hours_ago(24), minimal=True)


TEMPLATE_READERS = [
    (STATES_BY_DOMAIN_URI, _states_by_domain),
    (ENTITY_URI, lambda entity_id: get_entity_relationships(get_client().get_states(), entity_id)),
    (AREA_URI, _area_details),
    (HISTORY_URI, _entity_history),
]


def read_resource(uri: str) -> ReadResourceContents:
    """
    Read a resource by URI.

    Args:
        uri: A fixed resource URI or one matching a resource template

    Returns:
        The resource text with its MIME type

    Raises:
        ValueError: If no resource matches the URI
    """
    logger.debug(f"Reading resource: {uri}")

    if uri in FIXED_READERS:
        mime_type, reader = FIXED_READERS[uri]
        data = reader()
    else:
        for pattern, reader in TEMPLATE_READERS:
            match = pattern.match(uri)
            if match:
                mime_type = JSON
                data = reader(match.group(1))
                break
        else:
            raise ValueError(f"Unknown resource: {uri}")

    text = data if isinstance(data, str) else to_json(data)
    return ReadResourceContents(content=text, mime_type=mime_type)
