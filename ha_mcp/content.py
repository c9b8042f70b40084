"""
Home Assistant MCP Server - Content Helpers

Builders for annotated MCP content blocks and tool results.
"""

from __future__ import annotations

import json
from typing import Any, Literal, Optional

import mcp.types as types

from ha_mcp import config


Audience = list[Literal["user", "assistant"]]


def _annotations(audience: Optional[Audience], priority: Optional[float]) -> types.Annotations | None:
    if not audience and priority is None:
        return None
    return types.Annotations(audience=audience or None, priority=priority)


def to_json(data: Any) -> str:
    """Pretty-print data the way every JSON tool and resource payload is sent."""
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def create_text_content(
    text: str,
    audience: Optional[Audience] = None,
    priority: Optional[float] = None,
) -> types.TextContent:
    """
    Create a text content block.

    Args:
        text: Text payload
        audience: Intended readers ("user", "assistant")
        priority: Importance from 0.0 to 1.0
    """
    return types.TextContent(type="text", text=text, annotations=_annotations(audience, priority))


def create_resource_link(
    uri: str,
    name: str,
    description: str,
    mime_type: Optional[str] = None,
    audience: Optional[Audience] = None,
    priority: Optional[float] = None,
) -> types.ResourceLink:
    """Create a link to one of the server's resources for use in tool results."""
    return types.ResourceLink(
        type="resource_link",
        uri=uri,
        name=name,
        description=description,
        mimeType=mime_type,
        annotations=_annotations(audience, priority),
    )


def tool_result(
    text: str,
    audience: Optional[Audience] = None,
    priority: Optional[float] = None,
    structured: Any = None,
    links: Optional[list[types.ResourceLink]] = None,
    is_error: bool = False,
) -> types.CallToolResult:
    """
    Build a tool result.

    In compatibility mode only the text content (and the error flag) is
    returned; otherwise resource links and structured content are included.
    Structured content must be an object, so lists are wrapped as
    ``{"result": [...]}``.
    """
    content: list = [create_text_content(text, audience, priority)]
    structured_content = None

    if not config.MCP_COMPAT_MODE:
        content.extend(links or [])
        if structured is not None:
            structured_content = structured if isinstance(structured, dict) else {"result": structured}

    return types.CallToolResult(
        content=content,
        structuredContent=structured_content,
        isError=is_error,
    )


def error_result(message: str) -> types.CallToolResult:
    """Build the error result returned when a tool fails."""
    return tool_result(f"Error: {message}", audience=["user"], priority=1.0, is_error=True)
