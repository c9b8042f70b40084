"""
Tests for ha_mcp/docs.py - Documentation Fetcher

These tests cover HTML reduction, section selection and the release-notes
helpers, with the documentation site mocked by responses.
"""

import pytest
import responses

from ha_mcp.docs import (
    DocsFetchError,
    extract_breaking_changes_excerpt,
    extract_configuration_section,
    extract_content_from_html,
    extract_yaml_examples,
    fetch_url,
    integration_docs_url,
    release_notes_url,
    select_section,
)


DOC_PAGE = """
<html>
<head>
  <title>Template - Home Assistant</title>
  <meta name="description" content="Instructions on how to integrate Template Sensors into Home Assistant.">
  <style>.x { color: red; }</style>
</head>
<body>
  <header>Site header</header>
  <nav>Navigation</nav>
  <article>
    <h1>Template</h1>
    <p>The <strong>template</strong> integration allows creating entities.</p>
    <h2>Configuration</h2>
    <p>Add this to your <code>configuration.yaml</code>:</p>
    <pre>template:
  - sensor:
      - name: "Sun angle"</pre>
    <ul><li>name</li><li>state</li></ul>
    <h2>Troubleshooting</h2>
    <p>See the <a href="/docs/">docs</a>.</p>
  </article>
  <script>console.log("tracking")</script>
  <footer>Site footer</footer>
</body>
</html>
"""


class TestFetchUrl:
    def test_returns_body(self, mock_ha_api):
        mock_ha_api.add(responses.GET, "https://www.home-assistant.io/integrations/mqtt/", body="<html></html>")

        assert fetch_url("https://www.home-assistant.io/integrations/mqtt/") == "<html></html>"
        headers = mock_ha_api.calls[0].request.headers
        assert headers["User-Agent"] == "HomeAssistant-MCP-Server/2.2.0"

    def test_http_error(self, mock_ha_api):
        mock_ha_api.add(responses.GET, "https://www.home-assistant.io/integrations/nope/", status=404)

        with pytest.raises(DocsFetchError, match="HTTP 404: Not Found"):
            fetch_url("https://www.home-assistant.io/integrations/nope/")

    def test_connection_error(self, mock_ha_api):
        # No registered response: responses raises ConnectionError
        with pytest.raises(DocsFetchError):
            fetch_url("https://www.home-assistant.io/integrations/offline/")


class TestExtractContent:
    def test_title_and_description(self):
        page = extract_content_from_html(DOC_PAGE)

        assert page["title"] == "Template - Home Assistant"
        assert page["description"] == "Instructions on how to integrate Template Sensors into Home Assistant."

    def test_chrome_is_stripped(self):
        content = extract_content_from_html(DOC_PAGE)["content"]

        for noise in ("Site header", "Navigation", "Site footer", "tracking", "color: red"):
            assert noise not in content

    def test_markdown_conversion(self):
        content = extract_content_from_html(DOC_PAGE)["content"]

        assert content.startswith("# Template")
        assert "**template**" in content
        assert "`configuration.yaml`" in content
        assert "## Configuration" in content
        assert "```\ntemplate:\n  - sensor:" in content
        assert "- name" in content
        assert "See the docs." in content
        assert "\n\n\n" not in content

    def test_falls_back_to_body(self):
        content = extract_content_from_html("<html><body><p>Hello</p></body></html>")["content"]

        assert content == "Hello"

    def test_content_div(self):
        html = '<body><div class="sidebar">Side</div><div class="page-content">Main text</div></body>'

        assert extract_content_from_html(html)["content"] == "Main text"


class TestSections:
    CONTENT = (
        "# MQTT\n\nIntro text\n\n"
        "## Configuration\n\nUse this:\n\n```yaml\nmqtt:\n  broker: localhost\n```\n\n"
        "## Troubleshooting\n\nCheck logs\n\n```\nmqtt:\n  discovery: true\n```\n"
    )

    def test_configuration_section(self):
        section = extract_configuration_section(self.CONTENT)

        assert section.startswith("## Configuration")
        assert "broker: localhost" in section
        assert "Troubleshooting" not in section

    def test_configuration_section_missing(self):
        assert extract_configuration_section("# Title\n\nNo config here") is None

    def test_yaml_examples(self):
        assert extract_yaml_examples(self.CONTENT) == ["mqtt:\n  broker: localhost", "mqtt:\n  discovery: true"]

    def test_select_configuration(self):
        assert select_section(self.CONTENT, "configuration", []).startswith("## Configuration")

    def test_select_configuration_falls_back_to_page(self):
        assert select_section("plain page", "configuration", []) == "plain page"

    def test_select_examples(self):
        examples = extract_yaml_examples(self.CONTENT)

        text = select_section(self.CONTENT, "examples", examples)

        assert text.startswith("## YAML Examples\n\n### Example 1\n```yaml\nmqtt:\n  broker: localhost\n```")
        assert "### Example 2" in text

    def test_select_all(self):
        assert select_section(self.CONTENT, "all", []) == self.CONTENT


class TestReleaseNotes:
    def test_integration_docs_url(self):
        assert integration_docs_url("mqtt") == "https://www.home-assistant.io/integrations/mqtt/"

    @pytest.mark.parametrize("version, expected", [
        ("2024.12", "https://www.home-assistant.io/blog/2024/12/"),
        ("2024.1", "https://www.home-assistant.io/blog/2024/1/"),
        ("unknown", None),
        ("", None),
        ("2024.12.1", None),
    ])
    def test_release_notes_url(self, version, expected):
        assert release_notes_url(version) == expected

    def test_breaking_changes_excerpt(self):
        content = "## Highlights\n\nNew stuff\n\n## Breaking Changes\n\n- mqtt changed\n\n## Farewell\n\nbye"

        excerpt = extract_breaking_changes_excerpt(content)

        assert excerpt.startswith("Breaking Changes")
        assert "mqtt changed" in excerpt
        assert "Farewell" not in excerpt

    def test_breaking_changes_excerpt_capped(self):
        excerpt = extract_breaking_changes_excerpt("Breaking changes\n" + "x" * 9000)

        assert len(excerpt) == 5000

    def test_no_breaking_changes(self):
        assert extract_breaking_changes_excerpt("## Highlights\n\nAll good") == ""
