"""
Integration tests for ha:// resources against a mocked Home Assistant API.
"""

import json
import re

import pytest
import responses
from responses import matchers

from ha_mcp.resources import FIXED_READERS, RESOURCE_TEMPLATES, RESOURCES, read_resource


HA_API = "http://test-ha.local/core/api"


def read_json(uri):
    contents = read_resource(uri)
    assert contents.mime_type == "application/json"
    return json.loads(contents.content)


class TestResourceCatalog:
    def test_every_listed_resource_has_a_reader(self):
        assert [str(resource.uri) for resource in RESOURCES] == list(FIXED_READERS)
        assert len(RESOURCES) == 9

    def test_templates(self):
        assert [template.uriTemplate for template in RESOURCE_TEMPLATES] == [
            "ha://states/{domain}",
            "ha://entity/{entity_id}",
            "ha://area/{area_id}",
            "ha://history/{entity_id}",
        ]

    def test_unknown_resource(self):
        with pytest.raises(ValueError, match="Unknown resource: ha://garage"):
            read_resource("ha://garage")

    def test_unknown_scheme(self):
        with pytest.raises(ValueError, match="Unknown resource"):
            read_resource("file:///etc/hosts")


class TestFixedResources:
    """Tests for the nine fixed resources."""

    def test_state_summary_is_markdown(self, mock_states):
        contents = read_resource("ha://states/summary")

        assert contents.mime_type == "text/markdown"
        assert contents.content.startswith("## Home Assistant State Summary")

    def test_automations(self, mock_states):
        assert read_json("ha://automations") == [{
            "entity_id": "automation.morning_lights",
            "friendly_name": "Morning Lights",
            "state": "on",
            "last_triggered": "2024-06-01T07:00:00+00:00",
        }]

    def test_scripts(self, mock_states):
        assert read_json("ha://scripts") == [{"entity_id": "script.bedtime", "friendly_name": "Bedtime", "state": "off"}]

    def test_scenes(self, mock_states):
        assert read_json("ha://scenes") == [{"entity_id": "scene.movie_night", "friendly_name": "Movie Night"}]

    def test_areas_passes_template_output_through(self, mock_ha_api):
        rendered = '[{"id": "kitchen", "name": "Kitchen"}]'
        mock_ha_api.add(responses.POST, f"{HA_API}/template", body=rendered)

        contents = read_resource("ha://areas")

        assert contents.content == rendered

    def test_config_and_integrations(self, mock_ha_api):
        mock_ha_api.add(responses.GET, f"{HA_API}/config", json={"version": "2024.12.1", "components": ["mqtt", "hue"]})

        assert read_json("ha://config")["version"] == "2024.12.1"
        assert read_json("ha://integrations") == ["mqtt", "hue"]

    def test_integrations_missing_components(self, mock_ha_api):
        mock_ha_api.add(responses.GET, f"{HA_API}/config", json={"version": "2024.12.1"})

        assert read_json("ha://integrations") == []

    def test_anomalies(self, mock_ha_api):
        mock_ha_api.add(responses.GET, f"{HA_API}/states", json=[
            {"entity_id": "sensor.remote", "state": "ok", "attributes": {"battery_level": 4}},
            {"entity_id": "switch.fan", "state": "off", "attributes": {}},
        ])

        assert read_json("ha://anomalies") == [
            {"entity_id": "sensor.remote", "reason": "Low battery (4%)", "severity": "warning"},
        ]

    def test_suggestions(self, mock_states):
        assert [suggestion["type"] for suggestion in read_json("ha://suggestions")] == [
            "motion_light",
            "security_alert",
            "climate_optimization",
        ]


class TestTemplatedResources:
    """Tests for the URI-template resources."""

    def test_states_by_domain(self, mock_states):
        assert read_json("ha://states/climate") == [
            {"entity_id": "climate.thermostat", "state": "heat", "friendly_name": "Thermostat", "device_class": None},
        ]

    def test_states_for_empty_domain(self, mock_states):
        assert read_json("ha://states/vacuum") == []

    def test_entity(self, mock_states):
        details = read_json("ha://entity/binary_sensor.living_room_motion")

        assert details["domain"] == "binary_sensor"
        assert details["related_entities"][0]["entity_id"] == "light.living_room"

    def test_missing_entity(self, mock_states):
        assert read_json("ha://entity/light.nowhere") == {"error": "Entity not found"}

    def test_area(self, mock_states, mock_ha_api):
        mock_ha_api.add(
            responses.POST,
            f"{HA_API}/template",
            body="Living Room",
            match=[matchers.json_params_matcher({"template": "{{ area_name('living_room') }}"})],
        )

        area = read_json("ha://area/living_room")

        assert area["area_id"] == "living_room"
        assert area["area_name"] == "Living Room"
        assert [entity["entity_id"] for entity in area["entities"]] == [
            "light.living_room",
            "binary_sensor.living_room_motion",
        ]

    def test_history(self, mock_ha_api):
        mock_ha_api.add(
            responses.GET,
            re.compile(rf"{re.escape(HA_API)}/history/period/.*"),
            json=[[{"state": "20"}]],
            match=[matchers.query_param_matcher({
                "filter_entity_id": "sensor.temp",
                "minimal_response": "true",
                "no_attributes": "true",
            })],
        )

        assert read_json("ha://history/sensor.temp") == [[{"state": "20"}]]
