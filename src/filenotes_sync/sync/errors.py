"""Exceptions raised by cloud services and the local file service."""


class ReplicationError(Exception):
    """Base class for failures the replicator knows how to report."""


class ProviderUnavailable(ReplicationError):
    """The cloud provider could not be reached or answered with a server error."""


class AuthExpired(ReplicationError):
    """The provider rejected the stored credentials."""


class AuthMissing(ReplicationError):
    """No credentials are available; ``login()`` is required first."""


class TransferFailure(ReplicationError):
    """A single download, upload or delete failed.

    Attributes:
        name: File name the operation was acting on.
    """

    def __init__(self, name: str, message: str) -> None:
        super().__init__(f"{name}: {message}")
        self.name = name
