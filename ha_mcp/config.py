"""
Home Assistant MCP Server - Configuration Module

Central configuration for the MCP server: Home Assistant API access,
documentation sources, logging and protocol compatibility settings.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv


# Load environment variables
load_dotenv()

# Server identity
SERVER_NAME = "home-assistant"
SERVER_VERSION = "2.2.0"
USER_AGENT = f"HomeAssistant-MCP-Server/{SERVER_VERSION}"

# Home Assistant Configuration
# Inside the add-on the Supervisor proxies the core API and injects the token
SUPERVISOR_TOKEN = os.getenv("SUPERVISOR_TOKEN")
HA_API_URL = os.getenv("HA_API_URL", "http://supervisor/core/api")
HA_TIMEOUT = float(os.getenv("HA_TIMEOUT", "10"))

# Home Assistant documentation base URLs
HA_DOCS_BASE = os.getenv("HA_DOCS_BASE", "https://www.home-assistant.io").rstrip("/")
HA_INTEGRATIONS_URL = f"{HA_DOCS_BASE}/integrations"
HA_BLOG_URL = f"{HA_DOCS_BASE}/blog"
HA_CONFIG_DOCS_URL = f"{HA_DOCS_BASE}/docs/configuration/"
DOCS_TIMEOUT = float(os.getenv("DOCS_TIMEOUT", "15"))

# Size limits for fetched documentation
DOCS_CONTENT_LIMIT = 15000
RELEASE_NOTES_LIMIT = 5000
MAX_YAML_EXAMPLES = 5

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "info").lower()
LOG_FILE = os.getenv("LOG_FILE")

# Some MCP clients reject titles, output schemas, annotations and
# structured content, so by default only the baseline fields are sent.
MCP_COMPAT_MODE = os.getenv("MCP_COMPAT_MODE", "true").lower() == "true"


def validate_config() -> list[str]:
    """
    Validate that required configuration is present.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    if not SUPERVISOR_TOKEN:
        errors.append("SUPERVISOR_TOKEN environment variable is required")

    if not HA_API_URL:
        errors.append("HA_API_URL is not set")

    return errors
