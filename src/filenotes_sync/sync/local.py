"""Local side of replication: the flat managed notes directory."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from filenotes_sync.file_handler import (
    is_temp_file,
    validate_note_name,
    write_bytes_atomic,
)
from filenotes_sync.sync.models import FileDescriptor, Side

logger = logging.getLogger(__name__)


class FileSystemService:
    """Enumerate and mutate the files directly inside *notes_dir*.

    Args:
        notes_dir: The managed directory. It is created on first write
            if it does not exist yet.
    """

    def __init__(self, notes_dir: Path) -> None:
        self.notes_dir = notes_dir

    def path_for(self, name: str) -> Path:
        """Return the absolute path a note called *name* lives at."""
        return self.notes_dir / validate_note_name(name)

    def files(self) -> list[FileDescriptor]:
        """Return one descriptor per regular file, sorted by name.

        Subdirectories, symlinks and temporary files left by an interrupted
        write are ignored; there is no recursion.
        A missing directory yields an empty list.
        """
        if not self.notes_dir.exists():
            logger.debug("Notes directory %s does not exist yet", self.notes_dir)
            return []

        descriptors: list[FileDescriptor] = []
        for entry in sorted(self.notes_dir.iterdir(), key=lambda p: p.name):
            if entry.is_symlink() or not entry.is_file():
                continue
            if is_temp_file(entry.name):
                logger.debug("Skipping leftover temporary file %s", entry)
                continue
            stat = entry.stat()
            descriptors.append(
                FileDescriptor(
                    name=entry.name,
                    size=stat.st_size,
                    last_modified=datetime.fromtimestamp(
                        stat.st_mtime, tz=timezone.utc
                    ),
                    path=str(entry),
                    side=Side.LOCAL,
                    handle=entry,
                )
            )
        return descriptors

    def read(self, name: str) -> bytes:
        return self.path_for(name).read_bytes()

    def write(self, name: str, data: bytes) -> Path:
        """Atomically (re)write the note *name* with *data*."""
        path = self.path_for(name)
        write_bytes_atomic(path, data)
        logger.debug("Wrote %d bytes to %s", len(data), path)
        return path

    def delete(self, name: str) -> None:
        """Delete the note *name*; deleting a missing note is a no-op."""
        path = self.path_for(name)
        path.unlink(missing_ok=True)
        logger.debug("Deleted %s", path)
