"""MCP server for notes replication using stdio transport.

Exposes the replicator and the cloud facade as MCP tools so an agent can
trigger a sync, inspect its status and manage the provider session.

Transport: stdio
Protocol: JSON-RPC 2.0 over MCP
"""

import argparse
import asyncio
import logging
import sys

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions

from .. import __version__
from ..logger import DEFAULT_LOG_FILE, setup_logging
from ..services import Services
from .lifespan import server_lifespan
from .tools import SYNC_TOOLS, build_error_response, handle_sync_tool

logger = logging.getLogger(__name__)

SERVER_NAME = "filenotes-sync"

server = Server(SERVER_NAME)

_TOOL_NAMES = frozenset(tool.name for tool in SYNC_TOOLS)

# Set for the lifetime of main(), None otherwise
_services: Services | None = None


def get_services() -> Services:
    """Return the services built by the server lifespan.

    Raises:
        RuntimeError: If called outside main()
    """
    if _services is None:
        raise RuntimeError("Services not initialized. Server lifespan not started.")
    return _services


def set_services(services: Services | None) -> None:
    global _services
    _services = services


# ---------------------------------------------------------------------------
# MCP protocol handlers
# ---------------------------------------------------------------------------


@server.list_tools()
async def handle_list_tools() -> list[types.Tool]:
    return list(SYNC_TOOLS)


@server.call_tool()
async def handle_call_tool(
    name: str, arguments: dict | None
) -> types.CallToolResult:
    if name not in _TOOL_NAMES:
        return build_error_response(
            "unknown_tool",
            f"Unknown tool: {name}",
            "Use list_tools to see available tools.",
        )
    return await handle_sync_tool(name, arguments, get_services())


# ---------------------------------------------------------------------------
# Server lifecycle
# ---------------------------------------------------------------------------


async def _serve() -> None:
    options = InitializationOptions(
        server_name=SERVER_NAME,
        server_version=__version__,
        capabilities=server.get_capabilities(
            notification_options=NotificationOptions(),
            experimental_capabilities={},
        ),
    )
    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, options)


async def main(config_overrides: dict | None = None):
    """Configure logging, build services and serve until stdin closes.

    Args:
        config_overrides: notes_dir, state_dir and log_file, all optional
    """
    overrides = dict(config_overrides or {})
    # stdout belongs to JSON-RPC from here on
    setup_logging(mode="mcp", log_file=overrides.pop("log_file", None))

    async with server_lifespan(config_overrides=overrides or None) as ctx:
        set_services(ctx["services"])
        try:
            await _serve()
        finally:
            set_services(None)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filenotes-mcp",
        description="MCP server that replicates a notes directory with Dropbox",
        epilog=(
            "Configuration comes from .env, FILENOTES_* variables and "
            ".filenotes/config.yml. Diagnostics go to stderr and the log file."
        ),
    )
    parser.add_argument("--notes-dir", help="Override the notes directory")
    parser.add_argument("--state-dir", help="Override the settings directory")
    parser.add_argument(
        "--log-file",
        help=f"Log file path (default: $LOG_FILE or {DEFAULT_LOG_FILE})",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"filenotes-sync version {__version__}",
    )
    return parser


def run() -> None:
    """Console entry point for ``filenotes-mcp``."""
    args = _build_parser().parse_args()
    overrides = {
        key: value
        for key, value in (
            ("notes_dir", args.notes_dir),
            ("state_dir", args.state_dir),
            ("log_file", args.log_file),
        )
        if value
    }

    try:
        asyncio.run(main(config_overrides=overrides))
    except RuntimeError:
        # server_lifespan has already reported the cause on stderr
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    run()
