"""
Shared test fixtures for the Home Assistant MCP server.

Provides fixtures for mocking external dependencies:
- Home Assistant REST API (via responses library)
- Documentation site pages
- Sample entity states
"""

import pytest
import responses

from ha_mcp import homeassistant, logging_config


HA_API = "http://test-ha.local/core/api"
HA_TOKEN = "test-supervisor-token"
DOCS_BASE = "https://www.home-assistant.io"


# =============================================================================
# Environment Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Set up test configuration for all tests."""
    monkeypatch.setenv("SUPERVISOR_TOKEN", HA_TOKEN)
    monkeypatch.setenv("HA_API_URL", HA_API)

    # Also patch already-loaded config values since Python modules cache imports
    monkeypatch.setattr("ha_mcp.config.SUPERVISOR_TOKEN", HA_TOKEN)
    monkeypatch.setattr("ha_mcp.config.HA_API_URL", HA_API)
    monkeypatch.setattr("ha_mcp.config.MCP_COMPAT_MODE", True)

    homeassistant.reset_client()
    yield
    homeassistant.reset_client()
    logging_config.set_log_level("info")


@pytest.fixture
def full_protocol(monkeypatch):
    """Disable compatibility mode so structured output and annotations are sent."""
    monkeypatch.setattr("ha_mcp.config.MCP_COMPAT_MODE", False)


@pytest.fixture
def anyio_backend():
    return "asyncio"


# =============================================================================
# Home Assistant Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_ha_api():
    """
    Mock the Home Assistant API and documentation site using responses.

    Call add() to register responses; unmatched requests raise ConnectionError.
    """
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def sample_states():
    """A small but varied set of Home Assistant entity states."""
    return [
        {
            "entity_id": "light.living_room",
            "state": "on",
            "attributes": {"friendly_name": "Living Room Light", "area_id": "living_room"},
            "last_changed": "2024-06-01T08:00:00+00:00",
            "last_updated": "2024-06-01T08:00:00+00:00",
        },
        {
            "entity_id": "light.bedroom",
            "state": "off",
            "attributes": {"friendly_name": "Bedroom Light", "area_id": "bedroom"},
        },
        {
            "entity_id": "binary_sensor.living_room_motion",
            "state": "off",
            "attributes": {
                "friendly_name": "Living Room Motion",
                "device_class": "motion",
                "area_id": "living_room",
            },
        },
        {
            "entity_id": "binary_sensor.front_door",
            "state": "off",
            "attributes": {"friendly_name": "Front Door", "device_class": "door"},
        },
        {
            "entity_id": "sensor.outdoor_temperature",
            "state": "21.5",
            "attributes": {
                "friendly_name": "Outdoor Temperature",
                "device_class": "temperature",
                "unit_of_measurement": "°C",
            },
        },
        {
            "entity_id": "sensor.phone_battery",
            "state": "12",
            "attributes": {"friendly_name": "Phone Battery", "battery_level": 12},
        },
        {
            "entity_id": "climate.thermostat",
            "state": "heat",
            "attributes": {"friendly_name": "Thermostat"},
        },
        {
            "entity_id": "switch.garage",
            "state": "unavailable",
            "attributes": {"friendly_name": "Garage Switch"},
        },
        {
            "entity_id": "automation.morning_lights",
            "state": "on",
            "attributes": {
                "friendly_name": "Morning Lights",
                "last_triggered": "2024-06-01T07:00:00+00:00",
            },
        },
        {
            "entity_id": "script.bedtime",
            "state": "off",
            "attributes": {"friendly_name": "Bedtime"},
        },
        {
            "entity_id": "scene.movie_night",
            "state": "scening",
            "attributes": {"friendly_name": "Movie Night"},
        },
    ]


@pytest.fixture
def mock_states(mock_ha_api, sample_states):
    """Serve sample_states from GET /states."""
    mock_ha_api.add(responses.GET, f"{HA_API}/states", json=sample_states, status=200)
    return sample_states
