"""
Home Assistant MCP Server - Deprecation Checker

Known deprecated configuration patterns, a YAML syntax checker built on
them, and a curated list of breaking changes from recent releases.
"""

from __future__ import annotations

import re
from typing import Any, TypedDict

import yaml

from ha_mcp import config


class DeprecationPattern(TypedDict, total=False):
    """Type definition for a known deprecated configuration pattern."""

    pattern: re.Pattern
    message: str
    suggestion: str
    integration: str
    deprecated_in: str
    severity: str


DEPRECATION_PATTERNS: list[DeprecationPattern] = [
    {
        "pattern": re.compile(r"^sensor:\s*\n\s*-?\s*platform:\s*template", re.MULTILINE),
        "message": "Legacy template sensor syntax detected. Use top-level 'template:' key instead.",
        "suggestion": "template:\n  - sensor:\n      - name: \"My Sensor\"\n        state: \"{{ states('...') }}\"",
        "integration": "template",
        "deprecated_in": "2024.1",
    },
    {
        "pattern": re.compile(r"^binary_sensor:\s*\n\s*-?\s*platform:\s*template", re.MULTILINE),
        "message": "Legacy template binary_sensor syntax detected. Use top-level 'template:' key instead.",
        "suggestion": "template:\n  - binary_sensor:\n      - name: \"My Sensor\"\n        state: \"{{ is_state('...', 'on') }}\"",
        "integration": "template",
        "deprecated_in": "2024.1",
    },
    {
        "pattern": re.compile(r"entity_namespace:", re.MULTILINE),
        "message": "'entity_namespace' is deprecated. Use 'unique_id' for entity identification instead.",
        "suggestion": "Remove entity_namespace and add unique_id to each entity.",
        "deprecated_in": "2023.8",
    },
    {
        "pattern": re.compile(r"^\s*-\s*platform:\s*time_date", re.MULTILINE),
        "message": "The time_date sensor platform is deprecated.",
        "suggestion": "Use template sensors with now() or built-in date/time entities.",
        "integration": "time_date",
        "deprecated_in": "2024.6",
    },
    {
        "pattern": re.compile(r"automation:\s*\n\s*-?\s*alias:", re.MULTILINE),
        "message": "Consider using automation ID for better organization.",
        "suggestion": "Add 'id: unique_automation_id' to enable UI editing and better tracking.",
        "severity": "info",
    },
    {
        "pattern": re.compile(r"device_tracker:\s*\n\s*-?\s*platform:\s*(?:nmap|netgear|ping)", re.MULTILINE),
        "message": "Legacy device tracker platforms may have limited functionality.",
        "suggestion": "Consider using the device_tracker integration with the UI for better device tracking.",
        "severity": "info",
    },
    {
        "pattern": re.compile(r"cover:\s*\n\s*-?\s*platform:\s*template", re.MULTILINE),
        "message": "Legacy template cover syntax detected. Use top-level 'template:' key instead.",
        "suggestion": "template:\n  - cover:\n      - name: \"My Cover\"\n        state: \"{{ ... }}\"",
        "integration": "template",
        "deprecated_in": "2024.1",
    },
    {
        "pattern": re.compile(r"switch:\s*\n\s*-?\s*platform:\s*template", re.MULTILINE),
        "message": "Legacy template switch syntax detected. Consider using top-level 'template:' key.",
        "suggestion": "template:\n  - switch:\n      - name: \"My Switch\"\n        state: \"{{ ... }}\"",
        "integration": "template",
        "deprecated_in": "2024.4",
    },
    {
        "pattern": re.compile(r"homeassistant:\s*\n\s*customize:", re.MULTILINE),
        "message": "Entity customizations in configuration.yaml work but UI customizations are preferred.",
        "suggestion": "Consider using the UI (Settings -> Devices & Services -> Entities) for customizations.",
        "severity": "info",
    },
    {
        "pattern": re.compile(r"^\s*white_value:", re.MULTILINE),
        "message": "'white_value' is deprecated in light services.",
        "suggestion": "Use 'white' instead of 'white_value' in light service calls.",
        "deprecated_in": "2023.3",
    },
]


KNOWN_BREAKING_CHANGES: list[dict[str, Any]] = [
    {
        "version": "2024.12",
        "title": "Template sensor/binary_sensor syntax change",
        "description": "Legacy 'platform: template' under sensor/binary_sensor is deprecated. Use top-level 'template:' key.",
        "integration": "template",
        "url": "https://www.home-assistant.io/integrations/template/",
    },
    {
        "version": "2024.11",
        "title": "MQTT discovery changes",
        "description": "MQTT discovery payload format updated for better device support.",
        "integration": "mqtt",
        "url": "https://www.home-assistant.io/integrations/mqtt/",
    },
    {
        "version": "2024.10",
        "title": "REST sensor authentication",
        "description": "REST sensors now support digest authentication; some configurations may need updating.",
        "integration": "rest",
        "url": "https://www.home-assistant.io/integrations/rest/",
    },
    {
        "version": "2024.8",
        "title": "Automation trigger variables",
        "description": "Trigger variables are now more strictly typed in automations.",
        "integration": "automation",
        "url": "https://www.home-assistant.io/docs/automation/trigger/",
    },
    {
        "version": "2024.6",
        "title": "Time & Date sensor deprecation",
        "description": "The time_date platform is deprecated. Use template sensors with now() instead.",
        "integration": "time_date",
        "url": "https://www.home-assistant.io/integrations/time_date/",
    },
    {
        "version": "2024.4",
        "title": "Template switch/cover/fan syntax",
        "description": "Template platforms for switch, cover, and fan can now use the top-level 'template:' key.",
        "integration": "template",
        "url": "https://www.home-assistant.io/integrations/template/",
    },
    {
        "version": "2024.1",
        "title": "Legacy template sensor syntax deprecated",
        "description": "The 'platform: template' syntax under sensor: is deprecated in favor of the template: integration.",
        "integration": "template",
        "url": "https://www.home-assistant.io/integrations/template/",
    },
    {
        "version": "2023.12",
        "title": "Entity naming convention changes",
        "description": "Entities now follow stricter naming conventions. Some entity IDs may have changed.",
        "integration": None,
        "url": "https://www.home-assistant.io/blog/2023/12/",
    },
    {
        "version": "2023.8",
        "title": "entity_namespace deprecated",
        "description": "The entity_namespace option is deprecated. Use unique_id instead.",
        "integration": None,
        "url": "https://www.home-assistant.io/blog/2023/08/",
    },
    {
        "version": "2023.3",
        "title": "white_value deprecated in light services",
        "description": "Use 'white' instead of 'white_value' in light service calls.",
        "integration": "light",
        "url": "https://www.home-assistant.io/integrations/light/",
    },
]


class _HomeAssistantYamlLoader(yaml.SafeLoader):
    """SafeLoader that accepts HA's custom tags (!secret, !include, ...)."""


_HomeAssistantYamlLoader.add_multi_constructor("!", lambda loader, suffix, node: None)


def check_config_for_deprecations(
    yaml_config: str, integration: str | None = None
) -> dict[str, Any]:
    """
    Check YAML configuration for known deprecated patterns.

    Patterns tied to a different integration are skipped when ``integration``
    is given.

    Returns:
        Dict with deprecated (bool), warnings and suggestions lists
    """
    warnings = []
    suggestions = []
    deprecated = False

    for pattern in DEPRECATION_PATTERNS:
        if integration and pattern.get("integration") and pattern["integration"] != integration:
            continue

        if not pattern["pattern"].search(yaml_config):
            continue

        deprecated_in = pattern.get("deprecated_in")
        if deprecated_in:
            deprecated = True
            warnings.append(f"[DEPRECATED since {deprecated_in}] {pattern['message']}")
        else:
            warnings.append(f"[INFO] {pattern['message']}")

        if pattern.get("suggestion"):
            suggestions.append(pattern["suggestion"])

    return {"deprecated": deprecated, "warnings": warnings, "suggestions": suggestions}


def parse_yaml_error(yaml_config: str) -> str | None:
    """Return a short description of a YAML parse failure, or None if it parses."""
    try:
        yaml.load(yaml_config, Loader=_HomeAssistantYamlLoader)
    except yaml.YAMLError as error:
        problem = getattr(error, "problem", None) or str(error)
        mark = getattr(error, "problem_mark", None)
        if mark is not None:
            return f"{problem} (line {mark.line + 1}, column {mark.column + 1})"
        return problem
    return None


def check_config_syntax(yaml_config: str, integration: str | None = None) -> dict[str, Any]:
    """
    Analyze YAML configuration for deprecated syntax and common mistakes.

    Args:
        yaml_config: The YAML text to check
        integration: Integration the config is for, narrows the pattern set

    Returns:
        Dict with valid, deprecated, warnings, suggestions and docs_url
    """
    result = check_config_for_deprecations(yaml_config, integration)
    warnings = list(result["warnings"])
    suggestions = list(result["suggestions"])

    if "\t" in yaml_config:
        warnings.append("Tab characters detected. YAML requires spaces for indentation.")
        suggestions.append(
            "Replace all tabs with spaces (2 spaces per indent level is standard for Home Assistant)."
        )

    if not re.search(r"^[a-z_]+:", yaml_config, re.MULTILINE):
        warnings.append("No top-level key detected. Configuration should start with a domain key.")

    if re.search(r": \|$", yaml_config, re.MULTILINE):
        suggestions.append(
            "Multi-line strings with '|' should have content on the following lines, indented."
        )

    if re.search(r"entity_id:.*,", yaml_config, re.MULTILINE):
        suggestions.append(
            "Multiple entity_ids should be formatted as a YAML list, not comma-separated."
        )

    parse_error = parse_yaml_error(yaml_config)
    if parse_error:
        warnings.append(f"[ERROR] YAML parse error: {parse_error}")

    if integration:
        docs_url = f"{config.HA_INTEGRATIONS_URL}/{integration}/"
    else:
        docs_url = config.HA_CONFIG_DOCS_URL

    return {
        "valid": not any("DEPRECATED" in warning or "[ERROR]" in warning for warning in warnings),
        "deprecated": result["deprecated"],
        "warnings": warnings,
        "suggestions": suggestions,
        "docs_url": docs_url,
    }


def filter_breaking_changes(
    integration: str | None = None, version: str | None = None
) -> list[dict[str, Any]]:
    """
    Select curated breaking changes.

    Args:
        integration: Keep changes for this integration plus general ones
        version: Keep only changes for this exact release (e.g. "2024.12")
    """
    changes = KNOWN_BREAKING_CHANGES
    if integration:
        changes = [
            change for change in changes
            if change["integration"] == integration or change["integration"] is None
        ]
    if version:
        changes = [change for change in changes if change["version"] == version]
    return list(changes)
