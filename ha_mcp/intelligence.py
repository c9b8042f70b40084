"""
Home Assistant MCP Server - Intelligence Layer

Rule-based analysis over entity states: anomaly detection, a markdown state
summary, keyword entity search, device/area relationships and automation
suggestions. Every function is a single pass over an in-memory state list.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, TypedDict


class Anomaly(TypedDict):
    """A single detected anomaly."""

    entity_id: str
    reason: str
    severity: str


UNAVAILABLE_STATES = ("unavailable", "unknown")

LOW_BATTERY_THRESHOLD = 20
CELSIUS_RANGE = (-10, 50)
FAHRENHEIT_RANGE = (14, 122)
HUMIDITY_RANGE = (10, 95)
OPEN_HOURS_THRESHOLD = 4
DAYTIME_HOURS = (10, 16)

SUMMARY_UNAVAILABLE_LIMIT = 10
SUMMARY_ANOMALY_LIMIT = 5
SEARCH_RESULT_LIMIT = 20
RELATED_ENTITY_LIMIT = 10

_LEADING_NUMBER = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def get_domain(entity_id: str) -> str:
    """Return the domain part of an entity id."""
    return entity_id.split(".", 1)[0]


def parse_number(value: Any) -> float | None:
    """
    Parse the leading number of a state value.

    Sensor states arrive as strings such as "21.5" or "21.5 C"; anything
    without a leading number yields None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return None
    match = _LEADING_NUMBER.match(value)
    return float(match.group(0)) if match else None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def simplify_state(state: dict) -> dict:
    """Project a state to entity_id, state, friendly_name and device_class."""
    attributes = state.get("attributes") or {}
    return {
        "entity_id": state.get("entity_id"),
        "state": state.get("state"),
        "friendly_name": attributes.get("friendly_name"),
        "device_class": attributes.get("device_class"),
    }


def filter_by_domain(states: list[dict], domain: str | None) -> list[dict]:
    """Keep only states whose entity id belongs to ``domain`` (no-op when None)."""
    if not domain:
        return states
    prefix = f"{domain}."
    return [state for state in states if state.get("entity_id", "").startswith(prefix)]


# =============================================================================
# Anomaly Detection
# =============================================================================


def detect_anomaly(state: dict, now: datetime | None = None) -> Anomaly | None:
    """
    Check one entity against the anomaly rules.

    Rules are evaluated in order and the first match wins: low battery,
    out-of-range temperature, out-of-range humidity, door/window open too
    long, light on during the day.

    Args:
        state: Entity state dict
        now: Current local time (aware); defaults to the system clock

    Returns:
        Anomaly dict or None
    """
    now = now or datetime.now().astimezone()
    entity_id = state.get("entity_id", "")
    value = state.get("state")
    attributes = state.get("attributes") or {}
    domain = get_domain(entity_id)
    device_class = attributes.get("device_class")

    battery_level = attributes.get("battery_level")
    if battery_level is not None:
        level = parse_number(battery_level)
        if level is not None and level < LOW_BATTERY_THRESHOLD:
            return {
                "entity_id": entity_id,
                "reason": f"Low battery ({battery_level}%)",
                "severity": "warning",
            }

    if domain == "sensor" and device_class == "temperature":
        temperature = parse_number(value)
        if temperature is not None:
            unit = attributes.get("unit_of_measurement") or "°C"
            normal_min, normal_max = CELSIUS_RANGE if "C" in unit else FAHRENHEIT_RANGE
            if temperature < normal_min or temperature > normal_max:
                return {
                    "entity_id": entity_id,
                    "reason": f"Unusual temperature: {value}{unit}",
                    "severity": "warning",
                }

    if domain == "sensor" and device_class == "humidity":
        humidity = parse_number(value)
        if humidity is not None and (humidity < HUMIDITY_RANGE[0] or humidity > HUMIDITY_RANGE[1]):
            return {
                "entity_id": entity_id,
                "reason": f"Unusual humidity: {value}%",
                "severity": "warning",
            }

    if domain == "binary_sensor" and device_class in ("door", "window") and value == "on":
        last_changed = parse_timestamp(state.get("last_changed"))
        if last_changed is not None:
            hours_open = (now - last_changed).total_seconds() / 3600
            if hours_open > OPEN_HOURS_THRESHOLD:
                return {
                    "entity_id": entity_id,
                    "reason": f"Open for {hours_open:.1f} hours",
                    "severity": "info",
                }

    # Basic heuristic, local time
    if domain == "light" and value == "on":
        if DAYTIME_HOURS[0] <= now.hour <= DAYTIME_HOURS[1]:
            return {
                "entity_id": entity_id,
                "reason": "Light on during daytime",
                "severity": "info",
            }

    return None


def detect_anomalies(
    states: list[dict], domain: str | None = None, now: datetime | None = None
) -> list[Anomaly]:
    """
    Scan states for anomalies, warnings first.

    Args:
        states: Entity state dicts
        domain: Optional domain restriction
        now: Current local time for the time-based rules

    Returns:
        Anomalies, warnings ahead of everything else, otherwise in input order
    """
    anomalies = [
        anomaly
        for anomaly in (detect_anomaly(state, now) for state in filter_by_domain(states, domain))
        if anomaly is not None
    ]
    return sorted(anomalies, key=lambda anomaly: anomaly["severity"] != "warning")


# =============================================================================
# State Summary
# =============================================================================


def generate_state_summary(states: list[dict], now: datetime | None = None) -> str:
    """
    Generate a human-readable markdown summary of entity states.

    Args:
        states: Entity state dicts
        now: Current local time for the anomaly rules

    Returns:
        Markdown text with per-domain counts, unavailable entities and anomalies
    """
    by_domain: dict[str, dict[str, int]] = {}
    unavailable: list[str] = []
    anomalies: list[Anomaly] = []

    for state in states:
        entity_id = state.get("entity_id", "")
        info = by_domain.setdefault(get_domain(entity_id), {"count": 0, "on": 0, "off": 0})
        info["count"] += 1

        value = state.get("state")
        if value == "on":
            info["on"] += 1
        elif value == "off":
            info["off"] += 1
        elif value in UNAVAILABLE_STATES:
            unavailable.append(entity_id)

        anomaly = detect_anomaly(state, now)
        if anomaly:
            anomalies.append(anomaly)

    lines = ["## Home Assistant State Summary\n", "### By Domain"]

    for domain, info in sorted(by_domain.items(), key=lambda item: -item[1]["count"]):
        detail = f"{info['count']} entities"
        if info["on"] > 0 or info["off"] > 0:
            detail += f" ({info['on']} on, {info['off']} off)"
        lines.append(f"- **{domain}**: {detail}")

    if unavailable:
        lines.append("\n### Unavailable/Unknown Entities")
        for entity_id in unavailable[:SUMMARY_UNAVAILABLE_LIMIT]:
            lines.append(f"- {entity_id}")
        if len(unavailable) > SUMMARY_UNAVAILABLE_LIMIT:
            lines.append(f"- ... and {len(unavailable) - SUMMARY_UNAVAILABLE_LIMIT} more")

    if anomalies:
        lines.append("\n### Potential Anomalies Detected")
        for anomaly in anomalies[:SUMMARY_ANOMALY_LIMIT]:
            lines.append(f"- **{anomaly['entity_id']}**: {anomaly['reason']}")

    return "\n".join(lines)


# =============================================================================
# Entity Search
# =============================================================================


def search_entities(states: list[dict], query: str) -> list[dict]:
    """
    Keyword search over entity ids, names, device classes and states.

    Each query term found anywhere scores 1, plus 2 when it appears in the
    friendly name and 1 when it appears in the entity id.

    Args:
        states: Entity state dicts
        query: Free-text query (e.g., "bedroom lights")

    Returns:
        Up to 20 matches, best first, each with a ``score``
    """
    terms = query.lower().split()
    scored = []

    for state in states:
        attributes = state.get("attributes") or {}
        entity_id = str(state.get("entity_id", ""))
        friendly_name = str(attributes.get("friendly_name") or "").lower()
        search_text = " ".join([
            entity_id,
            friendly_name,
            str(attributes.get("device_class") or ""),
            str(state.get("state") or ""),
        ]).lower()

        score = 0
        for term in terms:
            if term in search_text:
                score += 1
                if term in friendly_name:
                    score += 2
                if term in entity_id:
                    score += 1

        if score > 0:
            scored.append((score, state))

    scored.sort(key=lambda item: -item[0])

    return [
        {**simplify_state(state), "score": score}
        for score, state in scored[:SEARCH_RESULT_LIMIT]
    ]


# =============================================================================
# Relationships
# =============================================================================


def get_entity_relationships(states: list[dict], entity_id: str) -> dict[str, Any]:
    """
    Describe an entity and the entities sharing its device or area.

    Args:
        states: Entity state dicts
        entity_id: Entity to describe

    Returns:
        Entity details with ``related_entities``, or {"error": "Entity not found"}
    """
    entity = next((state for state in states if state.get("entity_id") == entity_id), None)
    if entity is None:
        return {"error": "Entity not found"}

    attributes = entity.get("attributes") or {}
    device_id = attributes.get("device_id")
    area_id = attributes.get("area_id")

    related = []
    for state in states:
        if state.get("entity_id") == entity_id:
            continue
        other = state.get("attributes") or {}
        if device_id and other.get("device_id") == device_id:
            relationship = "same_device"
        elif area_id and other.get("area_id") == area_id:
            relationship = "same_area"
        else:
            continue
        related.append({
            "entity_id": state.get("entity_id"),
            "friendly_name": other.get("friendly_name"),
            "state": state.get("state"),
            "relationship": relationship,
        })

    return {
        "entity_id": entity_id,
        "friendly_name": attributes.get("friendly_name"),
        "state": entity.get("state"),
        "domain": get_domain(entity_id),
        "device_class": attributes.get("device_class"),
        "device_id": device_id,
        "area_id": area_id,
        "attributes": attributes,
        "related_entities": related[:RELATED_ENTITY_LIMIT],
    }


# =============================================================================
# Automation Suggestions
# =============================================================================


def _display_name(state: dict) -> str:
    return (state.get("attributes") or {}).get("friendly_name") or state.get("entity_id", "")


def _device_class(state: dict) -> Any:
    return (state.get("attributes") or {}).get("device_class")


def generate_suggestions(states: list[dict]) -> list[dict[str, Any]]:
    """
    Suggest automations based on the entities present.

    Returns:
        Suggestion dicts with at least type, title and description
    """
    suggestions: list[dict[str, Any]] = []

    motion_sensors = [
        state for state in states
        if _device_class(state) == "motion" or "motion" in state.get("entity_id", "")
    ]
    lights = filter_by_domain(states, "light")

    for motion in motion_sensors:
        area_id = (motion.get("attributes") or {}).get("area_id")
        if not area_id:
            continue
        area_lights = [
            light for light in lights
            if (light.get("attributes") or {}).get("area_id") == area_id
        ]
        if area_lights:
            light_names = ", ".join(_display_name(light) for light in area_lights)
            suggestions.append({
                "type": "motion_light",
                "title": "Motion-Activated Lighting",
                "description": (
                    f"Create automation: When {_display_name(motion)} detects motion, "
                    f"turn on {light_names}"
                ),
                "trigger_entity": motion.get("entity_id"),
                "action_entities": [light.get("entity_id") for light in area_lights],
            })

    openings = [state for state in states if _device_class(state) in ("door", "window")]
    if openings:
        suggestions.append({
            "type": "security_alert",
            "title": "Security Alert Automation",
            "description": "Create notification when doors/windows are left open for extended periods",
            "entities": [state.get("entity_id") for state in openings][:5],
        })

    thermostats = filter_by_domain(states, "climate")
    temperature_sensors = [state for state in states if _device_class(state) == "temperature"]
    if thermostats and temperature_sensors:
        suggestions.append({
            "type": "climate_optimization",
            "title": "Climate Optimization",
            "description": (
                "Create automations to adjust thermostat based on occupancy or outdoor temperature"
            ),
            "climate_entities": [state.get("entity_id") for state in thermostats],
            "sensor_entities": [state.get("entity_id") for state in temperature_sensors][:3],
        })

    power_sensors = [state for state in states if _device_class(state) in ("power", "energy")]
    if power_sensors:
        suggestions.append({
            "type": "energy_monitoring",
            "title": "Energy Usage Alerts",
            "description": "Create alerts for unusual energy consumption patterns",
            "entities": [state.get("entity_id") for state in power_sensors][:5],
        })

    return suggestions
