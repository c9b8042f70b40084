"""
Home Assistant MCP Server - Entity State Tools

Tools for reading entity states: raw or summarized state listings,
keyword entity search and entity details with device/area relationships.
"""

import mcp.types as types

from ha_mcp.content import create_resource_link, to_json, tool_result
from ha_mcp.homeassistant import get_client
from ha_mcp.intelligence import (
    filter_by_domain,
    generate_state_summary,
    get_entity_relationships,
    search_entities,
    simplify_state,
)
from ha_mcp.logging_config import get_logger
from ha_tools.schemas import ENTITY_DETAILS, ENTITY_STATE_ARRAY, READ_ONLY, SEARCH_RESULT


logger = get_logger("tools.states")

STATE_TOOLS = [
    {
        "name": "get_states",
        "title": "Get Entity States",
        "description": "Get the current state of entities. Can return all entities, filter by domain, or get a specific entity. Returns entity_id, state, and key attributes.",
        "input_schema": {
            "type": "object",
            "properties": {
                "entity_id": {
                    "type": "string",
                    "description": "Specific entity ID (e.g., 'light.living_room'). If not provided, returns all/filtered entities.",
                },
                "domain": {
                    "type": "string",
                    "description": "Filter by domain (e.g., 'light', 'switch', 'sensor', 'automation')",
                },
                "summarize": {
                    "type": "boolean",
                    "description": "If true, returns a human-readable summary instead of raw data",
                },
            },
        },
        "output_schema": ENTITY_STATE_ARRAY,
        "annotations": {**READ_ONLY, "openWorldHint": False},
    },
    {
        "name": "search_entities",
        "title": "Search Entities",
        "description": "Search for entities by name, type, or description. Uses semantic matching to find relevant entities.",
        "input_schema": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query (e.g., 'bedroom lights', 'temperature sensors', 'front door')",
                },
            },
            "required": ["query"],
        },
        "output_schema": SEARCH_RESULT,
        "annotations": READ_ONLY,
    },
    {
        "name": "get_entity_details",
        "title": "Get Entity Details",
        "description": "Get detailed information about an entity including its relationships to devices, areas, and related entities.",
        "input_schema": {
            "type": "object",
            "properties": {
                "entity_id": {
                    "type": "string",
                    "description": "The entity ID to get details for",
                },
            },
            "required": ["entity_id"],
        },
        "output_schema": ENTITY_DETAILS,
        "annotations": READ_ONLY,
    },
]


def get_states(
    entity_id: str | None = None, domain: str | None = None, summarize: bool = False
) -> types.CallToolResult:
    """
    Get one entity's raw state, a domain-filtered listing or a summary.

    Args:
        entity_id: Return only this entity's full state
        domain: Restrict the listing to one domain
        summarize: Return a markdown summary instead of JSON

    Returns:
        Tool result
    """
    client = get_client()

    if entity_id:
        state = client.get_state(entity_id)
        return tool_result(
            to_json(state),
            audience=["assistant"],
            priority=0.8,
            structured={"result": [simplify_state(state)]},
            links=[create_resource_link(
                f"ha://entity/{entity_id}",
                entity_id,
                f"Details and relationships for {entity_id}",
                mime_type="application/json",
            )],
        )

    states = filter_by_domain(client.get_states(), domain)

    simplified = [simplify_state(state) for state in states]

    if summarize:
        return tool_result(
            generate_state_summary(states),
            audience=["user", "assistant"],
            priority=0.9,
            structured=simplified,
        )

    return tool_result(to_json(simplified), audience=["assistant"], priority=0.7, structured=simplified)


def search(query: str) -> types.CallToolResult:
    """Search entities and report the best matches."""
    results = search_entities(get_client().get_states(), query)

    if not results:
        return tool_result(
            f'No entities found matching "{query}"',
            audience=["assistant"],
            priority=0.8,
            structured=[],
        )
    return tool_result(to_json(results), audience=["assistant"], priority=0.8, structured=results)


def get_entity_details(entity_id: str) -> types.CallToolResult:
    """Describe an entity together with its related entities."""
    details = get_entity_relationships(get_client().get_states(), entity_id)

    if "error" in details:
        return tool_result(to_json(details), audience=["assistant"], priority=0.8, is_error=True)
    return tool_result(to_json(details), audience=["assistant"], priority=0.8, structured=details)


def execute_state_tool(tool_name: str, tool_input: dict) -> types.CallToolResult:
    """
    Execute a state tool by name.

    Args:
        tool_name: Name of the tool
        tool_input: Tool input parameters

    Returns:
        Tool result
    """
    logger.debug(f"Executing state tool: {tool_name}")

    if tool_name == "get_states":
        return get_states(
            entity_id=tool_input.get("entity_id"),
            domain=tool_input.get("domain"),
            summarize=bool(tool_input.get("summarize", False)),
        )

    elif tool_name == "search_entities":
        return search(query=tool_input.get("query", ""))

    elif tool_name == "get_entity_details":
        return get_entity_details(entity_id=tool_input.get("entity_id", ""))

    else:
        raise ValueError(f"Unknown tool: {tool_name}")
