"""In-memory cloud service.

Holds the "remote folder" in a dict so the replicator can be exercised
without a provider account. Remote modification times come from an
injectable clock, which lets callers stage files "before" or "after" a
checkpoint.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from filenotes_sync.sync.errors import AuthExpired, TransferFailure
from filenotes_sync.sync.local import FileSystemService
from filenotes_sync.sync.models import FileDescriptor, Side

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryCloudService:
    """Dict-backed ``CloudService``.

    Args:
        filesystem: Local service downloads are written through.
        clock: Returns the instant stamped on uploaded files.
        authenticated: Initial session state.
    """

    def __init__(
        self,
        filesystem: FileSystemService,
        clock: Callable[[], datetime] = _utcnow,
        authenticated: bool = True,
    ) -> None:
        self.filesystem = filesystem
        self.clock = clock
        self._authenticated = authenticated
        self._files: dict[str, tuple[bytes, datetime]] = {}

    # ------------------------------------------------------------------
    # Test/setup helpers
    # ------------------------------------------------------------------

    def put(self, name: str, data: bytes, modified: datetime | None = None) -> None:
        """Place a file in the remote folder as another device would."""
        self._files[name] = (data, modified or self.clock())

    def content(self, name: str) -> bytes:
        return self._files[name][0]

    def names(self) -> list[str]:
        return sorted(self._files)

    # ------------------------------------------------------------------
    # CloudService
    # ------------------------------------------------------------------

    def is_authenticated(self) -> bool:
        return self._authenticated

    def login(self) -> str | None:
        if not self._authenticated:
            self._authenticated = True
            logger.info("In-memory service logged in")
        return None

    def logout(self) -> None:
        self._authenticated = False

    def files(self) -> list[FileDescriptor]:
        if not self._authenticated:
            raise AuthExpired("in-memory session is logged out")
        return [
            FileDescriptor(
                name=name,
                size=len(data),
                last_modified=modified,
                path=f"/{name}",
                side=Side.REMOTE,
                handle=name,
            )
            for name, (data, modified) in sorted(self._files.items())
        ]

    def download(
        self, file: FileDescriptor, rename_to: str | None = None
    ) -> None:
        if file.name not in self._files:
            raise TransferFailure(file.name, "not found in remote folder")
        self.filesystem.write(rename_to or file.name, self._files[file.name][0])

    def upload(self, file: FileDescriptor) -> None:
        self._files[file.name] = (self.filesystem.read(file.name), self.clock())

    def delete(self, file: FileDescriptor) -> None:
        if file.side == Side.LOCAL:
            self.filesystem.delete(file.name)
            return
        if self._files.pop(file.name, None) is None:
            raise TransferFailure(file.name, "not found in remote folder")
