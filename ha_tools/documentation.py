"""
Home Assistant MCP Server - Documentation Tools

Tools that keep generated configuration current: live integration docs,
breaking changes across releases and a deprecated-syntax checker.
"""

from datetime import datetime, timezone

import mcp.types as types

from ha_mcp import config
from ha_mcp.content import tool_result
from ha_mcp.deprecations import check_config_syntax, filter_breaking_changes
from ha_mcp.docs import (
    DocsFetchError,
    extract_breaking_changes_excerpt,
    extract_content_from_html,
    extract_yaml_examples,
    fetch_url,
    integration_docs_url,
    release_notes_url,
    select_section,
)
from ha_mcp.homeassistant import get_client
from ha_mcp.logging_config import get_logger, send_log
from ha_tools.schemas import BREAKING_CHANGES, CONFIG_SYNTAX_CHECK, INTEGRATION_DOCS, READ_ONLY


logger = get_logger("tools.documentation")

DOCUMENTATION_TOOLS = [
    {
        "name": "get_integration_docs",
        "title": "Get Integration Documentation",
        "description": "Fetch current documentation for a Home Assistant integration. Use this BEFORE writing configuration to ensure you use the latest syntax. Returns configuration examples, setup instructions, and deprecation notices.",
        "input_schema": {
            "type": "object",
            "properties": {
                "integration": {
                    "type": "string",
                    "description": "Integration name (e.g., 'template', 'mqtt', 'rest', 'sensor', 'automation')",
                },
                "section": {
                    "type": "string",
                    "enum": ["all", "configuration", "examples"],
                    "description": "Which section to focus on (default: 'configuration')",
                },
            },
            "required": ["integration"],
        },
        "output_schema": INTEGRATION_DOCS,
        "annotations": READ_ONLY,
    },
    {
        "name": "get_breaking_changes",
        "title": "Get Breaking Changes",
        "description": "Fetch recent breaking changes from Home Assistant release notes. Use this when troubleshooting configurations that stopped working after an update, or to check compatibility before suggesting configurations.",
        "input_schema": {
            "type": "object",
            "properties": {
                "integration": {
                    "type": "string",
                    "description": "Filter by specific integration name (optional)",
                },
                "version": {
                    "type": "string",
                    "description": "Get changes for a specific HA version (e.g., '2024.12'). Defaults to recent versions.",
                },
            },
        },
        "output_schema": BREAKING_CHANGES,
        "annotations": READ_ONLY,
    },
    {
        "name": "check_config_syntax",
        "title": "Check Configuration Syntax",
        "description": "Analyze YAML configuration for deprecated syntax patterns and suggest modern alternatives. Use this to validate configuration before presenting it to the user.",
        "input_schema": {
            "type": "object",
            "properties": {
                "yaml_config": {
                    "type": "string",
                    "description": "The YAML configuration to check",
                },
                "integration": {
                    "type": "string",
                    "description": "The integration this config is for (helps with specific checks)",
                },
            },
            "required": ["yaml_config"],
        },
        "output_schema": CONFIG_SYNTAX_CHECK,
        "annotations": READ_ONLY,
    },
]


def get_integration_docs(integration: str, section: str = "configuration") -> types.CallToolResult:
    """
    Fetch and condense the documentation page of an integration.

    Args:
        integration: Integration name (e.g., 'template', 'mqtt')
        section: 'configuration', 'examples' or 'all'

    Returns:
        Markdown tool result, or a fallback with suggestions if the page
        cannot be fetched
    """
    send_log("info", "docs", {"action": "get_integration_docs", "integration": integration, "section": section})

    url = integration_docs_url(integration)
    ha_version = get_client().get_version()

    try:
        html = fetch_url(url)
    except DocsFetchError as error:
        return tool_result(
            f"Unable to fetch documentation for '{integration}'.\n\n"
            f"**Docs URL:** {url}\n"
            f"**Error:** {error}\n\n"
            f"**Suggestion:** You can:\n"
            f"1. Try visiting the URL directly: {url}\n"
            f"2. Check if the integration name is correct\n"
            f"3. Use `validate_config` to check your configuration\n\n"
            f"**Your HA Version:** {ha_version}",
            audience=["assistant"],
            priority=0.8,
            structured={"integration": integration, "url": url, "ha_version": ha_version},
        )

    page = extract_content_from_html(html)
    examples = extract_yaml_examples(page["content"])
    content = select_section(page["content"], section, examples)[:config.DOCS_CONTENT_LIMIT]
    fetched_at = datetime.now(timezone.utc).isoformat()
    title = page["title"] or integration

    result = {
        "integration": integration,
        "url": url,
        "title": title,
        "description": page["description"],
        "ha_version": ha_version,
        "fetched_at": fetched_at,
        "content": content,
        "yaml_examples": examples[:config.MAX_YAML_EXAMPLES],
    }

    return tool_result(
        f"# {title}\n\n"
        f"**Integration:** {integration}\n"
        f"**Docs URL:** {url}\n"
        f"**Your HA Version:** {ha_version}\n"
        f"**Fetched:** {fetched_at}\n\n"
        f"---\n\n{content}",
        audience=["assistant"],
        priority=0.9,
        structured=result,
    )


def fetch_release_notes_excerpt(version: str) -> str:
    """Breaking-changes excerpt from a release's notes, or "" if unavailable."""
    url = release_notes_url(version)
    if url is None:
        return ""

    try:
        html = fetch_url(url)
    except DocsFetchError as error:
        send_log("debug", "docs", {"action": "release_notes_fetch_failed", "error": str(error)})
        return ""

    return extract_breaking_changes_excerpt(extract_content_from_html(html)["content"])


def get_breaking_changes(integration: str | None = None, version: str | None = None) -> types.CallToolResult:
    """
    Report curated breaking changes plus the matching release-notes excerpt.

    Args:
        integration: Restrict to one integration (general changes are kept)
        version: Restrict to one release, e.g. "2024.12"; defaults to the
            running release
    """
    send_log("info", "docs", {"action": "get_breaking_changes", "integration": integration, "version": version})

    ha_version = get_client().get_version()
    changes = filter_breaking_changes(integration, version)
    excerpt = fetch_release_notes_excerpt(version or ".".join(ha_version.split(".")[:2]))

    queried = f"integration '{integration}'" if integration else "all integrations"
    if version:
        queried += f" for version {version}"

    text = (
        "# Breaking Changes\n\n"
        f"**Your HA Version:** {ha_version}\n"
        f"**Queried:** {queried}\n\n"
    )

    if changes:
        text += "## Known Breaking Changes\n\n"
        for change in changes:
            text += f"### {change['version']}: {change['title']}\n"
            text += f"{change['description']}\n"
            text += f"**More info:** {change['url']}\n\n"
    else:
        text += "No specific breaking changes found for the query.\n\n"

    if excerpt:
        text += f"## From Release Notes\n\n{excerpt}\n"

    text += f"\n---\n**Tip:** Always check {config.HA_BLOG_URL}/categories/release-notes/ for the latest changes."

    return tool_result(
        text,
        audience=["assistant"],
        priority=0.9,
        structured={
            "ha_version": ha_version,
            "queried_version": version or "recent",
            "queried_integration": integration or "all",
            "changes": changes,
            "release_notes_excerpt": excerpt or None,
        },
    )


def format_syntax_report(result: dict) -> str:
    """Render a check_config_syntax result as markdown."""
    text = "# Configuration Syntax Check\n\n"
    text += f"**Status:** {'OK' if result['valid'] else 'Issues Found'}\n"
    text += f"**Deprecated Syntax:** {'Yes' if result['deprecated'] else 'No'}\n"
    text += f"**Docs:** {result['docs_url']}\n\n"

    if result["warnings"]:
        text += "## Warnings\n\n"
        text += "".join(f"- {warning}\n" for warning in result["warnings"])
        text += "\n"

    if result["suggestions"]:
        text += "## Suggestions\n\n"
        text += "".join(f"- {suggestion}\n" for suggestion in result["suggestions"])
        text += "\n"

    if not result["warnings"] and not result["suggestions"]:
        text += "No issues detected in the configuration syntax.\n\n"
        text += "**Note:** This is a basic syntax check. Use `validate_config` for full Home Assistant validation.\n"

    return text


def check_syntax(yaml_config: str, integration: str | None = None) -> types.CallToolResult:
    """Check YAML configuration for deprecated syntax and common mistakes."""
    send_log("info", "docs", {"action": "check_config_syntax", "integration": integration})

    result = check_config_syntax(yaml_config, integration)
    return tool_result(format_syntax_report(result), audience=["assistant"], priority=0.9, structured=result)


def execute_documentation_tool(tool_name: str, tool_input: dict) -> types.CallToolResult:
    """Execute a documentation tool by name."""
    logger.debug(f"Executing documentation tool: {tool_name}")

    if tool_name == "get_integration_docs":
        return get_integration_docs(
            integration=tool_input.get("integration", ""),
            section=tool_input.get("section") or "configuration",
        )

    elif tool_name == "get_breaking_changes":
        return get_breaking_changes(
            integration=tool_input.get("integration"),
            version=tool_input.get("version"),
        )

    elif tool_name == "check_config_syntax":
        return check_syntax(
            yaml_config=tool_input.get("yaml_config", ""),
            integration=tool_input.get("integration"),
        )

    else:
        raise ValueError(f"Unknown tool: {tool_name}")
