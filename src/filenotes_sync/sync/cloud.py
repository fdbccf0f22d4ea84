"""The capability set the replicator needs from a cloud storage provider.

Concrete providers (``DropboxService``, ``InMemoryCloudService``) satisfy
``CloudService`` structurally; the replicator never imports them.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import FileDescriptor


@runtime_checkable
class CloudService(Protocol):
    """Protocol that every cloud facade must satisfy."""

    def is_authenticated(self) -> bool:
        """Return ``True`` iff a usable session exists."""
        ...  # pragma: no cover

    def login(self) -> str | None:
        """Start credential acquisition if not authenticated.

        Idempotent. Returns provider-specific follow-up information (such
        as an authorization URL) or ``None`` when already authenticated.
        """
        ...  # pragma: no cover

    def logout(self) -> None:
        """Forget stored credentials."""
        ...  # pragma: no cover

    def files(self) -> list[FileDescriptor]:
        """List the managed remote folder (flat).

        Raises:
            ProviderUnavailable: The provider cannot be reached.
            AuthExpired: The provider rejected the credentials.
        """
        ...  # pragma: no cover

    def download(
        self, file: FileDescriptor, rename_to: str | None = None
    ) -> None:
        """Fetch *file* into the local managed directory.

        Args:
            file: A remote descriptor.
            rename_to: Local name to write instead of ``file.name``.
        """
        ...  # pragma: no cover

    def upload(self, file: FileDescriptor) -> None:
        """Copy the local *file* to the remote folder under the same name."""
        ...  # pragma: no cover

    def delete(self, file: FileDescriptor) -> None:
        """Remove *file* from the side it belongs to."""
        ...  # pragma: no cover
