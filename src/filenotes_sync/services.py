"""Wire the replication services together from a ``Config``.

Both the CLI and the MCP server build their collaborators here so that
they share one settings store, one notes directory and one cloud facade.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from dotenv import load_dotenv

from .config import Config, load_config
from .config_loader import discover_config_files, load_hierarchical_config
from .config_schema import build_config
from .sync.dropbox import DropboxService
from .sync.local import FileSystemService
from .sync.notes import NotesManager
from .sync.replicator import Replicator
from .sync.settings import NEVER, Settings

logger = logging.getLogger(__name__)


@dataclass
class Services:
    settings: Settings
    filesystem: FileSystemService
    notes: NotesManager
    cloud: DropboxService
    replicator: Replicator

    def status(self) -> dict:
        """Summarise checkpoint, dirty bit, session and local state."""
        last_sync = self.settings.get_last_sync()
        return {
            "notes_dir": str(self.filesystem.notes_dir),
            "last_sync": None if last_sync == NEVER else last_sync.isoformat(),
            "replication_required": self.notes.is_replication_required(),
            "authenticated": self.cloud.is_authenticated(),
            "local_files": len(self.notes.list_notes()),
            "conflicts": self.notes.conflicts(),
        }


def create_services(config: Config) -> Services:
    """Build every service for *config*."""
    settings = Settings(config.state_path)
    filesystem = FileSystemService(config.notes_path)
    notes = NotesManager(filesystem, settings)
    cloud = DropboxService(
        filesystem,
        settings,
        access_token=config.access_token,
        app_key=config.app_key,
        timeout=config.timeout,
    )
    replicator = Replicator(
        cloud=cloud,
        filesystem=filesystem,
        settings=settings,
        notes=notes,
    )
    logger.debug(
        "Services ready: notes_dir=%s state_dir=%s",
        config.notes_path,
        config.state_path,
    )
    return Services(
        settings=settings,
        filesystem=filesystem,
        notes=notes,
        cloud=cloud,
        replicator=replicator,
    )


def resolve_config(overrides: dict | None = None) -> tuple[Config, list[str]]:
    """Load configuration from every source and report which ones contributed.

    Precedence: CLI overrides > env vars (``.env`` loaded first) > YAML
    config > defaults.

    Args:
        overrides: Values from CLI flags (``notes_dir``, ``state_dir``,
            ``access_token``, ``debug``).

    Returns:
        ``(config, sources)`` where *sources* describes each contributing
        source for logging.

    Raises:
        ValueError: If the resulting configuration is invalid.
    """
    # .env first, so ${VAR} interpolation in YAML can see its values
    load_dotenv()

    sources: list[str] = []
    yaml_fallbacks: dict | None = None
    config_files = discover_config_files()
    if config_files:
        unified = build_config(load_hierarchical_config())
        yaml_fallbacks = unified.fallbacks()
        sources.append(f"config file: {config_files[0]}")

    overrides = overrides or {}
    config = load_config(
        notes_dir=overrides.get("notes_dir"),
        state_dir=overrides.get("state_dir"),
        access_token=overrides.get("access_token"),
        debug=overrides.get("debug", False),
        yaml_fallbacks=yaml_fallbacks,
    )
    if overrides:
        sources.append("CLI arguments")
    sources.append("environment variables")
    return config, sources
