"""
Tests for ha_mcp/config.py - Configuration Module

Tests configuration defaults, validation logic and the command-line
entry point that reports validation errors.
"""

from unittest.mock import patch

import pytest


class TestConfigDefaults:
    """Test configuration constants."""

    def test_server_identity(self):
        """The user agent should carry the server version."""
        from ha_mcp.config import SERVER_NAME, SERVER_VERSION, USER_AGENT

        assert SERVER_NAME == "home-assistant"
        assert USER_AGENT == f"HomeAssistant-MCP-Server/{SERVER_VERSION}"

    def test_docs_urls(self):
        """Documentation URLs should hang off the docs base."""
        from ha_mcp.config import HA_BLOG_URL, HA_CONFIG_DOCS_URL, HA_DOCS_BASE, HA_INTEGRATIONS_URL

        assert HA_INTEGRATIONS_URL == f"{HA_DOCS_BASE}/integrations"
        assert HA_BLOG_URL == f"{HA_DOCS_BASE}/blog"
        assert HA_CONFIG_DOCS_URL.endswith("/docs/configuration/")

    def test_content_limits(self):
        from ha_mcp.config import DOCS_CONTENT_LIMIT, MAX_YAML_EXAMPLES, RELEASE_NOTES_LIMIT

        assert DOCS_CONTENT_LIMIT == 15000
        assert RELEASE_NOTES_LIMIT == 5000
        assert MAX_YAML_EXAMPLES == 5


class TestValidateConfig:
    """Test configuration validation."""

    def test_validate_config_with_all_vars_set(self):
        """Validation should pass when all required vars are set."""
        from ha_mcp.config import validate_config

        assert validate_config() == []

    def test_validate_config_missing_token(self, monkeypatch):
        """Validation should fail when SUPERVISOR_TOKEN is missing."""
        monkeypatch.setattr("ha_mcp.config.SUPERVISOR_TOKEN", None)

        from ha_mcp.config import validate_config

        errors = validate_config()
        assert errors == ["SUPERVISOR_TOKEN environment variable is required"]

    def test_validate_config_missing_url(self, monkeypatch):
        """Validation should fail when HA_API_URL is blank."""
        monkeypatch.setattr("ha_mcp.config.HA_API_URL", "")

        from ha_mcp.config import validate_config

        assert any("HA_API_URL" in e for e in validate_config())


class TestMain:
    """Test the command-line entry point."""

    def test_check_ok(self, capsys):
        from ha_mcp.__main__ import main

        with patch("sys.argv", ["ha-mcp-server", "--check"]):
            assert main() == 0

        assert "Setup OK!" in capsys.readouterr().err

    def test_check_reports_errors(self, monkeypatch, capsys):
        monkeypatch.setattr("ha_mcp.config.SUPERVISOR_TOKEN", None)

        from ha_mcp.__main__ import main

        with patch("sys.argv", ["ha-mcp-server", "--check"]):
            assert main() == 1

        assert "Error: SUPERVISOR_TOKEN environment variable is required" in capsys.readouterr().err

    def test_serve_refuses_invalid_config(self, monkeypatch, capsys):
        monkeypatch.setattr("ha_mcp.config.SUPERVISOR_TOKEN", None)

        from ha_mcp.__main__ import main

        with patch("sys.argv", ["ha-mcp-server"]), patch("ha_mcp.server.run") as mock_run:
            assert main() == 1

        mock_run.assert_not_called()

    def test_serve_starts_server(self):
        from ha_mcp.__main__ import main

        with patch("sys.argv", ["ha-mcp-server"]), patch("ha_mcp.server.run") as mock_run:
            assert main() == 0

        mock_run.assert_called_once_with()


class TestPackageExports:
    @pytest.mark.parametrize("name", ["SERVER_NAME", "SERVER_VERSION", "validate_config", "get_logger", "send_log"])
    def test_exported(self, name):
        import ha_mcp

        assert hasattr(ha_mcp, name)
