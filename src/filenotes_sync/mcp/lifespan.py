"""Lifespan management for MCP server startup and shutdown."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from ..logger import apply_configured_level
from ..services import create_services, resolve_config

logger = logging.getLogger(__name__)


def _stderr_print(msg: str) -> None:
    """Print message to stderr for user feedback (safe in MCP mode)."""
    print(msg, file=sys.stderr, flush=True)


@asynccontextmanager
async def server_lifespan(
    config_overrides: dict[str, Any] | None = None,
) -> AsyncIterator[dict[str, Any]]:
    """
    Manage server startup and shutdown lifecycle.

    On startup:
    - Resolve configuration: CLI > env vars (.env) > YAML > defaults
    - Build the replication services
    - Report whether the cloud provider is authenticated (not fatal:
      ``cloud_login`` can fix it at runtime)

    Args:
        config_overrides: Optional dict with values from CLI
            (notes_dir, state_dir)

    Yields:
        Dict with 'services' key containing the wired ``Services``

    Raises:
        RuntimeError: If configuration is invalid.
    """
    logger.info("MCP server starting...")
    _stderr_print("filenotes-sync MCP server starting...")

    try:
        config, sources = resolve_config(config_overrides)
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        _stderr_print(f"ERROR: Configuration error: {e}")
        _stderr_print("  Ensure FILENOTES_NOTES_DIR is set.")
        raise RuntimeError(
            f"Configuration error: {e}. Ensure FILENOTES_NOTES_DIR is set."
        ) from e

    apply_configured_level(config.log_level, debug=config.debug)
    source_desc = ", ".join(sources)
    logger.info("Configuration loaded from: %s", source_desc)
    _stderr_print(f"  Configuration loaded from: {source_desc}")
    _stderr_print(f"  Notes directory: {config.notes_path}")

    services = create_services(config)
    if services.cloud.is_authenticated():
        _stderr_print("  Cloud provider: authenticated")
    else:
        logger.warning("Cloud provider not authenticated")
        _stderr_print("  Cloud provider: not authenticated (use cloud_login)")
    _stderr_print("Server ready. Waiting for MCP client connection...")

    yield {"services": services}

    logger.info("MCP server shutting down")
    _stderr_print("filenotes-sync MCP server shutting down.")
