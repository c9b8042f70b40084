"""
Home Assistant MCP Server - Protocol Wiring

Registers the tools, resources, prompts and logging handlers on an MCP
server and serves it over stdio. Handlers are async; the Home Assistant
client is synchronous, so every call into it runs in a worker thread.
"""

from __future__ import annotations

import sys

import anyio
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server

from ha_mcp import config
from ha_mcp.logging_config import send_log, set_log_level
from ha_mcp.prompts import PROMPTS, get_prompt
from ha_mcp.resources import RESOURCE_TEMPLATES, RESOURCES, read_resource
from ha_tools import ALL_TOOLS, execute_tool


def to_mcp_tool(definition: dict, compat_mode: bool | None = None) -> types.Tool:
    """
    Convert a tool definition into an MCP Tool.

    In compatibility mode only name, description and input schema are
    listed; otherwise title, output schema and behaviour hints are included.
    """
    if compat_mode is None:
        compat_mode = config.MCP_COMPAT_MODE

    if compat_mode:
        return types.Tool(
            name=definition["name"],
            description=definition["description"],
            inputSchema=definition["input_schema"],
        )

    return types.Tool(
        name=definition["name"],
        title=definition.get("title"),
        description=definition["description"],
        inputSchema=definition["input_schema"],
        outputSchema=definition.get("output_schema"),
        annotations=types.ToolAnnotations(
            title=definition.get("title"),
            **definition.get("annotations", {}),
        ),
    )


def create_server() -> Server:
    """Create the MCP server with every handler registered."""
    server = Server(config.SERVER_NAME, version=config.SERVER_VERSION)

    @server.set_logging_level()
    async def handle_set_logging_level(level: types.LoggingLevel) -> None:
        set_log_level(level)
        send_log("info", "mcp-server", {"action": "log_level_changed", "level": level})

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        send_log("debug", "mcp-server", {"action": "list_tools"})
        return [to_mcp_tool(tool) for tool in ALL_TOOLS]

    @server.call_tool()
    async def handle_call_tool(name: str, arguments: dict) -> types.CallToolResult:
        send_log("info", "mcp-server", {"action": "call_tool", "tool": name, "args": arguments})
        return await anyio.to_thread.run_sync(execute_tool, name, arguments)

    @server.list_resources()
    async def handle_list_resources() -> list[types.Resource]:
        send_log("debug", "mcp-server", {"action": "list_resources"})
        return RESOURCES

    @server.list_resource_templates()
    async def handle_list_resource_templates() -> list[types.ResourceTemplate]:
        return RESOURCE_TEMPLATES

    @server.read_resource()
    async def handle_read_resource(uri) -> list[ReadResourceContents]:
        uri = str(uri)
        send_log("debug", "mcp-server", {"action": "read_resource", "uri": uri})
        try:
            contents = await anyio.to_thread.run_sync(read_resource, uri)
        except Exception as error:
            send_log("error", "mcp-server", {"action": "read_resource_error", "uri": uri, "error": str(error)})
            raise ValueError(f"Failed to read resource {uri}: {error}") from error
        return [contents]

    @server.list_prompts()
    async def handle_list_prompts() -> list[types.Prompt]:
        send_log("debug", "mcp-server", {"action": "list_prompts"})
        return PROMPTS

    @server.get_prompt()
    async def handle_get_prompt(name: str, arguments: dict[str, str] | None) -> types.GetPromptResult:
        send_log("info", "mcp-server", {"action": "get_prompt", "prompt": name})
        try:
            return get_prompt(name, arguments)
        except ValueError as error:
            send_log("error", "mcp-server", {"action": "get_prompt_error", "prompt": name, "error": str(error)})
            raise ValueError(f"Failed to get prompt {name}: {error}") from error

    return server


def _announce_start() -> None:
    send_log("info", "mcp-server", {
        "action": "started",
        "version": config.SERVER_VERSION,
        "tools": len(ALL_TOOLS),
        "resources": len(RESOURCES),
        "prompts": len(PROMPTS),
    })

    print(f"Home Assistant MCP server v{config.SERVER_VERSION} started (Documentation Edition)", file=sys.stderr)
    print(
        f"Capabilities: Tools ({len(ALL_TOOLS)}), Resources ({len(RESOURCES)}), "
        f"Prompts ({len(PROMPTS)}), Logging",
        file=sys.stderr,
    )
    if config.MCP_COMPAT_MODE:
        print("Compatibility mode: plain tool listings and text-only results", file=sys.stderr)
    else:
        print(
            "Features: Structured Output, Tool Annotations, Resource Links, Content Annotations, Live Docs",
            file=sys.stderr,
        )


async def serve(server: Server | None = None) -> None:
    """Serve over stdio until the client disconnects."""
    server = server or create_server()

    async with stdio_server() as (read_stream, write_stream):
        _announce_start()
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run() -> None:
    """Blocking entry point."""
    anyio.run(serve)
