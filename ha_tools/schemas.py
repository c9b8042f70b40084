"""
Home Assistant MCP Server - Output Schemas

JSON schemas describing structured tool output. MCP requires an object at
the top level, so list-valued results are wrapped as ``{"result": [...]}``.
"""


def _list_of(item_schema: dict) -> dict:
    return {
        "type": "object",
        "properties": {"result": {"type": "array", "items": item_schema}},
        "required": ["result"],
    }


ENTITY_STATE_ARRAY = _list_of({
    "type": "object",
    "properties": {
        "entity_id": {"type": "string"},
        "state": {"type": "string"},
        "friendly_name": {"type": ["string", "null"]},
        "device_class": {"type": ["string", "null"]},
    },
    "required": ["entity_id", "state"],
})

SEARCH_RESULT = _list_of({
    "type": "object",
    "properties": {
        "entity_id": {"type": "string"},
        "state": {"type": "string"},
        "friendly_name": {"type": ["string", "null"]},
        "device_class": {"type": ["string", "null"]},
        "score": {"type": "number", "description": "Search relevance score"},
    },
    "required": ["entity_id", "state", "score"],
})

ENTITY_DETAILS = {
    "type": "object",
    "properties": {
        "entity_id": {"type": "string"},
        "friendly_name": {"type": ["string", "null"]},
        "state": {"type": "string"},
        "domain": {"type": "string"},
        "device_class": {"type": ["string", "null"]},
        "device_id": {"type": ["string", "null"]},
        "area_id": {"type": ["string", "null"]},
        "attributes": {"type": "object"},
        "related_entities": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "entity_id": {"type": "string"},
                    "friendly_name": {"type": ["string", "null"]},
                    "state": {"type": "string"},
                    "relationship": {"type": "string", "enum": ["same_device", "same_area"]},
                },
            },
        },
    },
    "required": ["entity_id", "state", "domain"],
}

SERVICE_CALL_RESULT = {
    "type": "object",
    "properties": {
        "success": {"type": "boolean"},
        "domain": {"type": "string"},
        "service": {"type": "string"},
        "affected_entities": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["success", "domain", "service"],
}

ANOMALY_ARRAY = _list_of({
    "type": "object",
    "properties": {
        "entity_id": {"type": "string"},
        "reason": {"type": "string"},
        "severity": {"type": "string", "enum": ["info", "warning", "error"]},
    },
    "required": ["entity_id", "reason", "severity"],
})

SUGGESTION_ARRAY = _list_of({
    "type": "object",
    "properties": {
        "type": {"type": "string"},
        "title": {"type": "string"},
        "description": {"type": "string"},
    },
    "required": ["type", "title", "description"],
})

DIAGNOSTICS = {
    "type": "object",
    "properties": {
        "entity_id": {"type": "string"},
        "timestamp": {"type": "string"},
        "current_state": {"type": "object"},
        "checks": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "check": {"type": "string"},
                    "status": {"type": "string", "enum": ["ok", "info", "warning", "error"]},
                    "details": {"type": "string"},
                },
            },
        },
        "history_summary": {"type": "object"},
        "relationships": {"type": "object"},
    },
    "required": ["entity_id", "timestamp", "checks"],
}

CONFIG_VALIDATION = {
    "type": "object",
    "properties": {
        "result": {"type": "string", "enum": ["valid", "invalid"]},
        "errors": {"type": ["string", "null"]},
    },
    "required": ["result"],
}

INTEGRATION_DOCS = {
    "type": "object",
    "properties": {
        "integration": {"type": "string", "description": "Integration name"},
        "url": {"type": "string", "description": "Documentation URL"},
        "title": {"type": "string", "description": "Integration title"},
        "description": {"type": "string", "description": "Integration description"},
        "content": {"type": "string", "description": "Selected documentation content"},
        "yaml_examples": {"type": "array", "items": {"type": "string"}},
        "ha_version": {"type": "string", "description": "Current HA version"},
        "fetched_at": {"type": "string", "description": "Timestamp when docs were fetched"},
    },
    "required": ["integration", "url"],
}

BREAKING_CHANGES = {
    "type": "object",
    "properties": {
        "ha_version": {"type": "string", "description": "Current Home Assistant version"},
        "changes": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "version": {"type": "string"},
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "integration": {"type": ["string", "null"]},
                    "url": {"type": "string"},
                },
            },
        },
    },
    "required": ["ha_version", "changes"],
}

CONFIG_SYNTAX_CHECK = {
    "type": "object",
    "properties": {
        "valid": {"type": "boolean", "description": "Whether the syntax appears valid"},
        "deprecated": {"type": "boolean", "description": "Whether deprecated syntax was detected"},
        "warnings": {
            "type": "array",
            "items": {"type": "string"},
            "description": "List of warnings about the configuration",
        },
        "suggestions": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Suggestions for improving the configuration",
        },
        "docs_url": {"type": "string", "description": "URL to relevant documentation"},
    },
    "required": ["valid", "deprecated", "warnings", "suggestions"],
}

AREA_ARRAY = _list_of({
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "name": {"type": "string"},
    },
    "required": ["id", "name"],
})

READ_ONLY = {"readOnlyHint": True, "idempotentHint": True}
