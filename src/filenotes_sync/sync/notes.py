"""Notes manager: note-level access plus the ``replication_required`` dirty bit."""

from __future__ import annotations

import logging

from filenotes_sync.file_handler import decode_note
from filenotes_sync.sync.local import FileSystemService
from filenotes_sync.sync.settings import Settings

logger = logging.getLogger(__name__)

CONFLICT_SUFFIX = ".conflict"


class NotesManager:
    """Edit notes and flag that a replication run should be scheduled.

    Args:
        filesystem: Service owning the managed directory.
        settings: Store the dirty bit is persisted in.
    """

    def __init__(self, filesystem: FileSystemService, settings: Settings) -> None:
        self.filesystem = filesystem
        self.settings = settings

    def is_replication_required(self) -> bool:
        return self.settings.is_replication_required()

    def set_replication_required(self, required: bool) -> None:
        self.settings.set_replication_required(required)
        logger.debug("replication_required=%s", required)

    def list_notes(self) -> list[str]:
        return [f.name for f in self.filesystem.files()]

    def conflicts(self) -> list[str]:
        """Names of ``<name>.conflict`` files currently in the directory."""
        return [n for n in self.list_notes() if n.endswith(CONFLICT_SUFFIX)]

    def read_note(self, name: str) -> str:
        content, _ = decode_note(self.filesystem.path_for(name))
        return content

    def save_note(self, name: str, text: str) -> None:
        self.filesystem.write(name, text.encode("utf-8"))
        self.set_replication_required(True)

    def delete_note(self, name: str) -> None:
        self.filesystem.delete(name)
        self.set_replication_required(True)
