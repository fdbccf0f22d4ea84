"""Pydantic models for `.filenotes/config.yml`.

The file has three sections, `storage`, `dropbox` and `logging`.  Values set
here are the lowest-priority layer: `load_config` only uses them when no
CLI argument or environment variable supplies the same key.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class StorageConfig(BaseModel):
    """Where the notes and the replication settings live."""

    notes_dir: str | None = Field(
        default=None, description="Directory holding the note files"
    )
    state_dir: str | None = Field(
        default=None,
        description="Directory for persisted replication settings",
    )

    model_config = {"frozen": True}


class DropboxConfig(BaseModel):
    """Dropbox provider settings."""

    access_token: str | None = Field(
        default=None, description="OAuth2 bearer token"
    )
    app_key: str | None = Field(
        default=None,
        description="App key used to build the authorization URL",
    )
    timeout: int = Field(
        default=60,
        ge=1,
        le=600,
        description="HTTP timeout in seconds for Dropbox calls (1-600)",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    ``level`` ranks below ``LOG_LEVEL`` and ``--debug``; unset keeps the
    mode default.
    """

    level: str | None = Field(
        default=None, description="Log level name (DEBUG, INFO, WARNING, ...)"
    )

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """The whole config file.  An empty file is valid."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    dropbox: DropboxConfig = Field(default_factory=DropboxConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}

    def fallbacks(self) -> dict:
        """Flatten set values into the keys ``load_config`` reads from ``yaml_fallbacks``."""
        values = {
            "notes_dir": self.storage.notes_dir,
            "state_dir": self.storage.state_dir,
            "access_token": self.dropbox.access_token,
            "app_key": self.dropbox.app_key,
            "timeout": self.dropbox.timeout,
            "log_level": self.logging.level,
        }
        return {k: v for k, v in values.items() if v is not None}


# ---------------------------------------------------------------------------
# Factory function
# ---------------------------------------------------------------------------


def build_config(raw_data: dict) -> UnifiedConfig:
    """Validate the merged YAML mapping from ``load_hierarchical_config``.

    Raises:
        pydantic.ValidationError: On unknown value types or out-of-range
            timeouts.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)
