"""
Home Assistant MCP Server - Documentation Fetcher

Fetches pages from the Home Assistant documentation site and reduces them
to markdown-flavoured text: configuration sections, YAML examples and
release-note excerpts.
"""

from __future__ import annotations

import re

import requests
from bs4 import BeautifulSoup

from ha_mcp import config
from ha_mcp.logging_config import send_log


class DocsFetchError(Exception):
    """Raised when a documentation page cannot be fetched."""
    pass


STRIPPED_TAGS = ["script", "style", "nav", "header", "footer"]

CONFIG_SECTION_PATTERNS = [
    re.compile(r"## Configuration[\s\S]*?(?=\n## |\Z)", re.IGNORECASE),
    re.compile(r"## YAML Configuration[\s\S]*?(?=\n## |\Z)", re.IGNORECASE),
    re.compile(r"### Configuration Variables[\s\S]*?(?=\n### |\n## |\Z)", re.IGNORECASE),
    re.compile(r"## Setup[\s\S]*?(?=\n## |\Z)", re.IGNORECASE),
]

YAML_BLOCK_PATTERN = re.compile(r"```(?:yaml|YAML)?\n([\s\S]*?)```")
BREAKING_CHANGES_PATTERN = re.compile(r"breaking changes?[\s\S]*?(?=\n## |\Z)", re.IGNORECASE)
RELEASE_VERSION_PATTERN = re.compile(r"^(\d{4})\.(\d{1,2})$")


def fetch_url(url: str) -> str:
    """
    Fetch a URL and return its text content.

    Raises:
        DocsFetchError: On connection failures or non-success responses
    """
    send_log("debug", "docs", {"action": "fetch", "url": url})

    try:
        response = requests.get(
            url,
            headers={
                "User-Agent": config.USER_AGENT,
                "Accept": "text/html,application/xhtml+xml,text/plain",
            },
            timeout=config.DOCS_TIMEOUT,
        )
    except requests.exceptions.RequestException as error:
        send_log("error", "docs", {"action": "fetch_error", "url": url, "error": str(error)})
        raise DocsFetchError(str(error)) from error

    if not response.ok:
        message = f"HTTP {response.status_code}: {response.reason}"
        send_log("error", "docs", {"action": "fetch_error", "url": url, "error": message})
        raise DocsFetchError(message)

    return response.text


def _find_main_content(soup: BeautifulSoup):
    """Pick the main content element: article, main, a content div, then body."""
    return (
        soup.find("article")
        or soup.find("main")
        or soup.find("div", class_=lambda value: bool(value) and "content" in value)
        or soup.body
        or soup
    )


def _to_markdown_text(element) -> str:
    """Flatten an element to text, keeping code, headings, lists and emphasis."""
    for pre in element.find_all("pre"):
        pre.replace_with(f"\n```\n{pre.get_text()}\n```\n")

    for code in element.find_all("code"):
        code.replace_with(f"`{code.get_text()}`")

    for tag_name, marker in (("strong", "**"), ("b", "**"), ("em", "*"), ("i", "*")):
        for tag in element.find_all(tag_name):
            tag.replace_with(f"{marker}{tag.get_text()}{marker}")

    for link in element.find_all("a"):
        link.unwrap()

    for level in range(1, 5):
        for heading in element.find_all(f"h{level}"):
            heading.replace_with(f"\n{'#' * level} {heading.get_text()}\n")

    for item in element.find_all("li"):
        item.insert(0, "- ")
        item.append("\n")
        item.unwrap()

    for paragraph in element.find_all("p"):
        paragraph.insert(0, "\n")
        paragraph.append("\n")
        paragraph.unwrap()

    for br in element.find_all("br"):
        br.replace_with("\n")

    text = element.get_text().replace("\xa0", " ")
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def extract_content_from_html(html: str) -> dict[str, str]:
    """
    Extract meaningful content from an HTML page.

    Returns:
        Dict with title, description (meta description) and content
    """
    soup = BeautifulSoup(html, "html.parser")

    for tag in soup.find_all(STRIPPED_TAGS):
        tag.decompose()

    title = soup.title.get_text().strip() if soup.title else ""

    meta = soup.find("meta", attrs={"name": "description"})
    description = meta.get("content", "").strip() if meta else ""

    content = _to_markdown_text(_find_main_content(soup))

    return {"title": title, "description": description, "content": content}


def extract_configuration_section(content: str) -> str | None:
    """Return the first configuration-related section of a page, if any."""
    for pattern in CONFIG_SECTION_PATTERNS:
        match = pattern.search(content)
        if match:
            return match.group(0).strip()
    return None


def extract_yaml_examples(content: str) -> list[str]:
    """Return the bodies of yaml-tagged or untagged fenced code blocks."""
    return [match.group(1).strip() for match in YAML_BLOCK_PATTERN.finditer(content)]


def select_section(content: str, section: str, examples: list[str]) -> str:
    """
    Narrow page content to the requested section.

    ``configuration`` falls back to the whole page when no configuration
    section exists; ``examples`` does the same when the page has no examples.
    """
    if section == "configuration":
        return extract_configuration_section(content) or content

    if section == "examples" and examples:
        blocks = [
            f"### Example {index}\n```yaml\n{example}\n```"
            for index, example in enumerate(examples, start=1)
        ]
        return "## YAML Examples\n\n" + "\n\n".join(blocks)

    return content


def integration_docs_url(integration: str) -> str:
    """Documentation URL of an integration."""
    return f"{config.HA_INTEGRATIONS_URL}/{integration}/"


def release_notes_url(version: str) -> str | None:
    """
    Blog URL of a release's notes, e.g. 2024.12 -> <blog>/2024/12/.

    Returns None when ``version`` is not a YYYY.M release number.
    """
    if not RELEASE_VERSION_PATTERN.match(version):
        return None
    year, month = version.split(".")
    return f"{config.HA_BLOG_URL}/{year}/{month}/"


def extract_breaking_changes_excerpt(content: str) -> str:
    """Return the breaking-changes part of release notes, capped in length."""
    match = BREAKING_CHANGES_PATTERN.search(content)
    if not match:
        return ""
    return match.group(0)[:config.RELEASE_NOTES_LIMIT]
