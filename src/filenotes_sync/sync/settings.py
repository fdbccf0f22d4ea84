"""Persisted replication settings.

Keeps the single JSON document ``settings.json`` in the state directory.
It holds the ``last_sync`` checkpoint, the ``replication_required`` dirty
bit and the stored Dropbox access token.

Key design choices:

* **Atomic writes** -- every setter writes to a temp file then calls
  ``os.replace()`` so a crash never leaves a half-written document.
* **Sentinel checkpoint** -- ``NEVER`` (``datetime.min`` in UTC) stands for
  "no successful run yet" and is stored as JSON ``null``.
* **Read-through** -- each getter reloads the file, so two services
  sharing a state directory observe each other's writes.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

NEVER = datetime.min.replace(tzinfo=timezone.utc)

SETTINGS_FILE = "settings.json"


def _empty_settings() -> dict:
    return {
        "version": 1,
        "last_sync": None,
        "replication_required": False,
        "dropbox_access_token": None,
    }


class Settings:
    """Load, save, and query replication settings.

    Args:
        state_dir: Directory holding ``settings.json``.
    """

    def __init__(self, state_dir: Path) -> None:
        self._state_dir = state_dir

    @property
    def path(self) -> Path:
        return self._state_dir / SETTINGS_FILE

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> dict:
        """Load settings from disk, or an empty document if none exists."""
        if not self.path.exists():
            return _empty_settings()
        with open(self.path, encoding="utf-8") as fh:
            data = json.load(fh)
        return {**_empty_settings(), **data}

    def save(self, data: dict) -> None:
        """Persist *data* atomically, creating ``state_dir`` if needed."""
        self._state_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self._state_dir), suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    def _update(self, **values) -> None:
        data = self.load()
        data.update(values)
        self.save(data)

    # ------------------------------------------------------------------
    # Checkpoint
    # ------------------------------------------------------------------

    def get_last_sync(self) -> datetime:
        """Return the last successful sync instant, or ``NEVER``."""
        raw = self.load().get("last_sync")
        if raw is None:
            return NEVER
        return _as_utc(datetime.fromisoformat(raw))

    def set_last_sync(self, when: datetime) -> None:
        """Record *when* as the checkpoint; ``NEVER`` clears it."""
        when = _as_utc(when)
        self._update(last_sync=None if when == NEVER else when.isoformat())
        logger.debug("last_sync set to %s", when.isoformat())

    def reset_last_sync(self) -> None:
        """Forget the checkpoint so the next run is a first sync."""
        self.set_last_sync(NEVER)

    # ------------------------------------------------------------------
    # Dirty bit
    # ------------------------------------------------------------------

    def is_replication_required(self) -> bool:
        return bool(self.load().get("replication_required", False))

    def set_replication_required(self, required: bool) -> None:
        self._update(replication_required=bool(required))

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def get_dropbox_access_token(self) -> str | None:
        return self.load().get("dropbox_access_token") or None

    def set_dropbox_access_token(self, token: str) -> None:
        self._update(dropbox_access_token=token)

    def clear_dropbox_access_token(self) -> None:
        self._update(dropbox_access_token=None)


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
