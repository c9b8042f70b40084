"""
Home Assistant MCP Server - Home Assistant Integration Module

Provides connection and communication with the Home Assistant REST API.
Handles authentication, service calls, state, history and registry queries.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

import requests

from ha_mcp import config
from ha_mcp.logging_config import send_log


# Jinja templates evaluated by HA for registry data the REST API doesn't expose
AREAS_TEMPLATE = (
    "{% set area_list = [] %}{% for area in areas() %}"
    "{% set area_list = area_list + [{'id': area, 'name': area_name(area)}] %}"
    "{% endfor %}{{ area_list | tojson }}"
)
DEVICES_TEMPLATE = "{{ devices() | list }}"
AREA_DEVICES_TEMPLATE = "{{{{ area_devices('{area_id}') | list }}}}"
AREA_NAME_TEMPLATE = "{{{{ area_name('{area_id}') }}}}"


class HomeAssistantError(Exception):
    """Base exception for Home Assistant errors."""
    pass


class HomeAssistantConnectionError(HomeAssistantError):
    """Raised when connection to Home Assistant fails."""
    pass


class HomeAssistantAuthError(HomeAssistantError):
    """Raised when authentication with Home Assistant fails."""
    pass


def iso_hours_ago(hours: float, now: Optional[datetime] = None) -> str:
    """Return an ISO-8601 UTC timestamp ``hours`` before now."""
    now = now or datetime.now(timezone.utc)
    return (now - timedelta(hours=hours)).isoformat()


def iso_hours_ahead(hours: float, now: Optional[datetime] = None) -> str:
    """Return an ISO-8601 UTC timestamp ``hours`` after now."""
    now = now or datetime.now(timezone.utc)
    return (now + timedelta(hours=hours)).isoformat()


class HomeAssistantClient:
    """
    Client for communicating with the Home Assistant REST API.

    Every failure surfaces as a HomeAssistantError subclass; callers decide
    how to present it.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize Home Assistant client.

        Args:
            base_url: API base URL including the /api suffix (defaults to HA_API_URL)
            token: Bearer token (defaults to SUPERVISOR_TOKEN)
            timeout: Request timeout in seconds (defaults to HA_TIMEOUT)
        """
        self.base_url = (base_url or config.HA_API_URL or "").rstrip("/")
        self.token = token or config.SUPERVISOR_TOKEN

        if not self.base_url:
            raise HomeAssistantError("Home Assistant URL not configured")
        if not self.token:
            raise HomeAssistantAuthError("Home Assistant token not configured")

        self._session = requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        })
        self._timeout = timeout or config.HA_TIMEOUT

    def _make_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict] = None,
        params: Optional[Dict] = None,
    ) -> Union[Dict, List, str]:
        """
        Make HTTP request to the Home Assistant API.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path relative to the base URL
            data: Optional JSON body
            params: Optional query parameters

        Returns:
            Parsed JSON for JSON responses, body text otherwise

        Raises:
            HomeAssistantConnectionError: On connection failures
            HomeAssistantAuthError: On authentication failures
            HomeAssistantError: On any other non-success response
        """
        url = f"{self.base_url}{endpoint}"
        send_log("debug", "ha-api", {"action": "request", "endpoint": endpoint, "method": method})

        try:
            response = self._session.request(
                method=method,
                url=url,
                json=data,
                params=params,
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout as error:
            send_log("error", "ha-api", {"action": "error", "endpoint": endpoint, "error": str(error)})
            raise HomeAssistantConnectionError("Request to Home Assistant timed out") from error
        except requests.exceptions.ConnectionError as error:
            send_log("error", "ha-api", {"action": "error", "endpoint": endpoint, "error": str(error)})
            raise HomeAssistantConnectionError(
                f"Cannot connect to Home Assistant at {self.base_url}"
            ) from error
        except requests.exceptions.RequestException as error:
            send_log("error", "ha-api", {"action": "error", "endpoint": endpoint, "error": str(error)})
            raise HomeAssistantError(f"API request failed: {error}") from error

        if not response.ok:
            text = response.text
            send_log("error", "ha-api", {
                "action": "error",
                "endpoint": endpoint,
                "status": response.status_code,
                "error": text,
            })
            message = f"HA API error ({response.status_code}): {text}"
            if response.status_code == 401:
                raise HomeAssistantAuthError(message)
            raise HomeAssistantError(message)

        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                result = response.json()
            except ValueError as error:
                send_log("error", "ha-api", {"action": "error", "endpoint": endpoint, "error": str(error)})
                raise HomeAssistantError(f"Invalid JSON response from {endpoint}") from error
            send_log("debug", "ha-api", {"action": "response", "endpoint": endpoint, "success": True})
            return result
        return response.text

    # -------------------------------------------------------------------------
    # Configuration & Health
    # -------------------------------------------------------------------------

    def get_config(self) -> dict:
        """
        Get Home Assistant configuration.

        Returns:
            Configuration dict with location, units, version, components, etc.
        """
        return self._make_request("GET", "/config")

    def get_version(self) -> str:
        """
        Get the running Home Assistant version.

        Returns:
            Version string, or "unknown" if it cannot be determined
        """
        try:
            result = self.get_config()
        except HomeAssistantError as error:
            send_log("warning", "ha-api", {"action": "version_fetch_failed", "error": str(error)})
            return "unknown"

        if isinstance(result, dict):
            return result.get("version") or "unknown"
        return "unknown"

    def check_config(self) -> dict:
        """Run Home Assistant's configuration check."""
        return self._make_request("POST", "/config/core/check_config")

    def get_error_log(self) -> str:
        """Get the raw Home Assistant error log."""
        result = self._make_request("GET", "/error_log")
        return result if isinstance(result, str) else str(result)

    # -------------------------------------------------------------------------
    # State Queries
    # -------------------------------------------------------------------------

    def get_states(self) -> List[Dict]:
        """
        Get states of all entities.

        Returns:
            List of entity state dicts
        """
        return self._make_request("GET", "/states")

    def get_state(self, entity_id: str) -> dict:
        """
        Get state of a specific entity.

        Args:
            entity_id: Entity ID (e.g., 'light.living_room')

        Returns:
            Entity state dict with state, attributes, last_changed, etc.
        """
        return self._make_request("GET", f"/states/{entity_id}")

    def get_entities_by_domain(self, domain: str) -> List[Dict]:
        """
        Get all entities for a specific domain.

        Args:
            domain: Entity domain (e.g., 'light', 'switch', 'sensor')

        Returns:
            List of entity state dicts matching the domain
        """
        return [
            state for state in self.get_states()
            if state.get("entity_id", "").startswith(f"{domain}.")
        ]

    # -------------------------------------------------------------------------
    # Services, Events & Templates
    # -------------------------------------------------------------------------

    def call_service(
        self,
        domain: str,
        service: str,
        data: Optional[Dict] = None,
        target: Optional[Dict] = None,
    ) -> Any:
        """
        Call a Home Assistant service.

        Args:
            domain: Service domain (e.g., 'light', 'switch', 'scene')
            service: Service name (e.g., 'turn_on', 'turn_off', 'toggle')
            data: Optional service data
            target: Optional target specification (entity_id, area_id, device_id)

        Returns:
            The API response, normally the list of changed states

        Example:
            client.call_service(
                domain='light',
                service='turn_on',
                target={'entity_id': 'light.living_room'},
                data={'brightness_pct': 50},
            )
        """
        payload = {}
        if data:
            payload.update(data)
        if target:
            payload.update(target)

        return self._make_request("POST", f"/services/{domain}/{service}", data=payload)

    def get_services(self) -> List[Dict]:
        """
        Get all available services.

        Returns:
            List of {"domain": ..., "services": {...}} dicts
        """
        return self._make_request("GET", "/services")

    def fire_event(self, event_type: str, event_data: Optional[Dict] = None) -> Any:
        """Fire an event on the Home Assistant event bus."""
        return self._make_request("POST", f"/events/{event_type}", data=event_data or {})

    def render_template(self, template: str) -> str:
        """
        Render a Jinja2 template with Home Assistant's template engine.

        Returns:
            Rendered text
        """
        result = self._make_request("POST", "/template", data={"template": template})
        return result if isinstance(result, str) else str(result)

    # -------------------------------------------------------------------------
    # Areas & Devices
    # -------------------------------------------------------------------------

    def get_areas(self) -> str:
        """Get all areas as a JSON string of {"id", "name"} objects."""
        return self.render_template(AREAS_TEMPLATE)

    def get_area_name(self, area_id: str) -> str:
        """Get the display name of an area."""
        return self.render_template(AREA_NAME_TEMPLATE.format(area_id=area_id))

    def get_devices(self, area_id: Optional[str] = None) -> str:
        """Get device IDs, optionally restricted to one area."""
        if area_id:
            return self.render_template(AREA_DEVICES_TEMPLATE.format(area_id=area_id))
        return self.render_template(DEVICES_TEMPLATE)

    # -------------------------------------------------------------------------
    # History, Logbook & Calendars
    # -------------------------------------------------------------------------

    def get_history(
        self,
        entity_id: str,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        minimal: bool = False,
    ) -> List:
        """
        Get entity history.

        Args:
            entity_id: Entity ID to filter
            start_time: ISO format start time (defaults to 24 hours ago)
            end_time: ISO format end time (defaults to now)
            minimal: Request minimal responses without attributes

        Returns:
            List of per-entity state change lists
        """
        start_time = start_time or iso_hours_ago(24)
        params = {"filter_entity_id": entity_id}
        if end_time:
            params["end_time"] = end_time
        if minimal:
            params["minimal_response"] = "true"
            params["no_attributes"] = "true"

        return self._make_request(
            "GET", f"/history/period/{quote(start_time, safe='')}", params=params
        )

    def get_logbook(
        self,
        start_time: Optional[str] = None,
        entity_id: Optional[str] = None,
        end_time: Optional[str] = None,
    ) -> List:
        """
        Get logbook entries.

        Args:
            start_time: ISO format start time (defaults to 24 hours ago)
            entity_id: Optional entity filter
            end_time: ISO format end time

        Returns:
            List of logbook entries
        """
        start_time = start_time or iso_hours_ago(24)
        params = {}
        if entity_id:
            params["entity"] = entity_id
        if end_time:
            params["end_time"] = end_time

        return self._make_request(
            "GET", f"/logbook/{quote(start_time, safe='')}", params=params or None
        )

    def get_calendars(self) -> List[Dict]:
        """List calendar entities."""
        return self._make_request("GET", "/calendars")

    def get_calendar_events(
        self,
        calendar_entity: str,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[Dict]:
        """
        Get events of one calendar.

        Args:
            calendar_entity: Calendar entity ID (e.g., 'calendar.family')
            start: ISO start (defaults to now)
            end: ISO end (defaults to seven days from now)
        """
        params = {
            "start": start or iso_hours_ahead(0),
            "end": end or iso_hours_ahead(7 * 24),
        }
        return self._make_request("GET", f"/calendars/{calendar_entity}", params=params)

    def close(self):
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


# Module-level default client

_default_client: Optional[HomeAssistantClient] = None
_client_lock = threading.Lock()


def get_client() -> HomeAssistantClient:
    """
    Get or create the default Home Assistant client.

    Returns:
        HomeAssistantClient instance
    """
    global _default_client
    with _client_lock:
        if _default_client is None:
            _default_client = HomeAssistantClient()
        return _default_client


def reset_client() -> None:
    """Close and discard the default client."""
    global _default_client
    with _client_lock:
        if _default_client is not None:
            _default_client.close()
        _default_client = None
