"""
Home Assistant MCP Server - Entry Point

Usage:
    ha-mcp-server            Serve MCP over stdio
    ha-mcp-server --check    Verify configuration and exit
"""

import argparse
import sys

from ha_mcp import config
from ha_mcp.logging_config import setup_logging


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Home Assistant MCP server - tools, resources and prompts over stdio"
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Verify configuration and exit",
    )
    args = parser.parse_args()

    errors = config.validate_config()

    if args.check:
        if not errors:
            print("Setup OK!", file=sys.stderr)
            return 0
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    setup_logging()

    # Tool modules load only once configuration is valid
    from ha_mcp.server import run

    run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
