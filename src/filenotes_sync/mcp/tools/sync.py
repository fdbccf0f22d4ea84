"""MCP tool handlers for notes replication.

Defines four tools:

- ``notes_sync`` -- run one replication (optionally as a fresh first sync).
- ``notes_sync_status`` -- checkpoint, dirty bit, session and conflicts.
- ``cloud_login`` -- start provider authorization if needed.
- ``cloud_logout`` -- forget the stored provider token.
"""

from __future__ import annotations

import logging
from typing import Any

import mcp.types as types

from ...core.async_utils import run_sync
from ...services import Services
from ...sync.errors import ReplicationError
from ...sync.reporter import (
    format_replication_report,
    format_status,
    report_to_json,
)
from .errors import build_error_response, translate_replication_error

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------


SYNC_TOOLS: list[types.Tool] = [
    types.Tool(
        name="notes_sync",
        description=(
            "Replicate the local notes directory with the cloud folder. "
            "Uploads, downloads and deletes files as needed; conflicting "
            "remote copies are saved as <name>.conflict."
        ),
        annotations=types.ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "full": {
                    "type": "boolean",
                    "default": False,
                    "description": (
                        "Ignore the last sync checkpoint and run a first "
                        "sync (newest wins, nothing deleted)"
                    ),
                },
            },
            "required": [],
        },
    ),
    types.Tool(
        name="notes_sync_status",
        description=(
            "Show replication status -- last sync time, whether a sync is "
            "pending, authentication state and unresolved conflicts."
        ),
        annotations=types.ToolAnnotations(
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=False,
        ),
        inputSchema={"type": "object", "properties": {}, "required": []},
    ),
    types.Tool(
        name="cloud_login",
        description=(
            "Start cloud provider authorization. Returns the URL to visit "
            "when no token is stored yet."
        ),
        annotations=types.ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema={"type": "object", "properties": {}, "required": []},
    ),
    types.Tool(
        name="cloud_logout",
        description="Forget the stored cloud provider token.",
        annotations=types.ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=True,
            openWorldHint=False,
        ),
        inputSchema={"type": "object", "properties": {}, "required": []},
    ),
]


# ---------------------------------------------------------------------------
# Tool handler
# ---------------------------------------------------------------------------


async def handle_sync_tool(
    name: str,
    arguments: dict[str, Any] | None,
    services: Services,
) -> types.CallToolResult:
    """Dispatch and execute a replication tool.

    Args:
        name: Tool name.
        arguments: Tool arguments dict.
        services: Wired replication services.

    Returns:
        ``CallToolResult`` with tool output or error details.
    """
    args = arguments or {}

    try:
        match name:
            case "notes_sync":
                return await _handle_notes_sync(args, services)
            case "notes_sync_status":
                return await _handle_status(services)
            case "cloud_login":
                return await _handle_login(services)
            case "cloud_logout":
                return await _handle_logout(services)
            case _:
                raise ValueError(f"Unknown sync tool: {name}")

    except ValueError as exc:
        return build_error_response(
            "validation_error",
            str(exc),
            "Check parameter values and configuration, then retry.",
        )
    except ReplicationError as exc:
        return translate_replication_error(exc)
    except Exception as exc:
        logger.exception("Sync tool error: %s", exc)
        return build_error_response(
            "server_error",
            str(exc),
            "Check the notes directory and cloud connectivity.",
        )


# ---------------------------------------------------------------------------
# Individual handlers
# ---------------------------------------------------------------------------


async def _handle_notes_sync(
    args: dict[str, Any], services: Services
) -> types.CallToolResult:
    report = await run_sync(
        services.replicator.invoke, full=bool(args.get("full", False))
    )
    if report is None:
        return build_error_response(
            "already_running",
            "A replication run is already in progress.",
            "Wait for it to finish, then call notes_sync_status.",
        )
    if report.skipped:
        return build_error_response(
            "auth_missing",
            f"Replication skipped: {report.skipped}",
            "Call cloud_login and complete the provider authorization.",
        )

    return types.CallToolResult(
        content=[
            types.TextContent(
                type="text", text=format_replication_report(report)
            )
        ],
        structuredContent=report_to_json(report),
        isError=not report.success,
    )


async def _handle_status(services: Services) -> types.CallToolResult:
    status = await run_sync(services.status)
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=format_status(status))],
        structuredContent=status,
    )


async def _handle_login(services: Services) -> types.CallToolResult:
    url = await run_sync(services.cloud.login)
    if url is None:
        text = "Already authenticated."
    else:
        text = (
            f"Authorization required. Visit:\n{url}\n\n"
            "Then set DROPBOX_ACCESS_TOKEN (or dropbox.access_token) to the issued token."
        )
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        structuredContent={"authenticated": url is None, "authorize_url": url},
    )


async def _handle_logout(services: Services) -> types.CallToolResult:
    await run_sync(services.cloud.logout)
    return types.CallToolResult(
        content=[types.TextContent(type="text", text="Logged out.")],
        structuredContent={"authenticated": False},
    )
