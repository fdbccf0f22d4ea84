"""Error response builders for MCP tool handlers.

Structured error responses carry a corrective action so an agent can
recover (log in again, retry later, fix configuration) without a human.
"""

import mcp.types as types

from ...sync.errors import (
    AuthExpired,
    AuthMissing,
    ProviderUnavailable,
    ReplicationError,
    TransferFailure,
)


def build_error_response(
    error_type: str, message: str, corrective_action: str
) -> types.CallToolResult:
    """Build a structured error response with corrective action.

    Args:
        error_type: Error category (validation_error, auth_missing,
            auth_expired, provider_unavailable, transfer_failure,
            server_error, unknown_tool)
        message: Human-readable error description
        corrective_action: Specific action the agent can take to resolve the error

    Returns:
        CallToolResult with isError=True

    Examples:
        >>> build_error_response("auth_missing", "No token", "Call cloud_login.")
        CallToolResult(content=[TextContent(...)], isError=True)
    """
    error_text = f"Error ({error_type}): {message}\n\nAction: {corrective_action}"

    return types.CallToolResult(
        content=[types.TextContent(type="text", text=error_text)],
        isError=True,
    )


_REPLICATION_ERRORS: list[tuple[type[ReplicationError], str, str]] = [
    (
        AuthMissing,
        "auth_missing",
        "Call cloud_login and complete the provider authorization.",
    ),
    (
        AuthExpired,
        "auth_expired",
        "Call cloud_logout, then cloud_login to obtain a fresh token.",
    ),
    (
        ProviderUnavailable,
        "provider_unavailable",
        "The cloud provider is unreachable; retry notes_sync later.",
    ),
    (
        TransferFailure,
        "transfer_failure",
        "Retry notes_sync; applied changes are kept and the checkpoint was not advanced.",
    ),
]


def translate_replication_error(
    error: ReplicationError,
) -> types.CallToolResult:
    """Map a replication exception to a structured error response."""
    for error_cls, error_type, action in _REPLICATION_ERRORS:
        if isinstance(error, error_cls):
            return build_error_response(error_type, str(error), action)
    return build_error_response(
        "server_error", str(error), "Check the server log for details."
    )
