"""Bidirectional notes replication.

Public API for keeping a flat local directory of note files in agreement
with a remote cloud folder.

Architecture
------------
The replicator correlates files **by name only** and decides per name
from modification times and a single persisted checkpoint (``last_sync``).
Without a checkpoint it runs a *first sync*: last write wins and nothing
is deleted.  With one it runs an *incremental sync*, where "changed"
means "modified after the checkpoint" and deletions propagate both ways.
When both sides changed, the remote copy is saved locally as
``<name>.conflict`` and the local note is left alone.

Modules:

- ``replicator`` -- ``Replicator``: runs one reconciliation and emits events.
- ``cloud``      -- ``CloudService``: the provider capability protocol.
- ``dropbox``    -- ``DropboxService``: Dropbox HTTP API implementation.
- ``memory``     -- ``InMemoryCloudService``: dict-backed implementation.
- ``local``      -- ``FileSystemService``: the managed notes directory.
- ``settings``   -- ``Settings``: checkpoint, dirty bit and token storage.
- ``notes``      -- ``NotesManager``: note access and the dirty bit.
- ``models``     -- ``FileDescriptor``, ``Event``, ``ReplicationReport``.
- ``errors``     -- provider and transfer exceptions.
- ``reporter``   -- human-readable and JSON report formatting.

Usage example
-------------
::

    from pathlib import Path
    from filenotes_sync.sync import (
        FileSystemService, InMemoryCloudService, NotesManager,
        Replicator, Settings, format_replication_report,
    )

    fs = FileSystemService(Path("~/Notes").expanduser())
    settings = Settings(Path("~/.filenotes").expanduser())
    replicator = Replicator(
        cloud=InMemoryCloudService(fs),
        filesystem=fs,
        settings=settings,
        notes=NotesManager(fs, settings),
    )

    class Printer:
        def update(self, source, event):
            print(event.message())

    replicator.add_observer(Printer())
    report = replicator.invoke()
    print(format_replication_report(report))
"""

from .cloud import CloudService
from .dropbox import DropboxService
from .errors import (
    AuthExpired,
    AuthMissing,
    ProviderUnavailable,
    ReplicationError,
    TransferFailure,
)
from .local import FileSystemService
from .memory import InMemoryCloudService
from .models import (
    Event,
    EventType,
    FileDescriptor,
    ReplicationReport,
    Side,
)
from .notes import CONFLICT_SUFFIX, NotesManager
from .replicator import Replicator, ReplicatorObserver, ReplicatorState
from .reporter import (
    format_conflict_diff,
    format_replication_report,
    format_status,
    report_to_json,
)
from .settings import NEVER, Settings

__all__ = [
    "AuthExpired",
    "AuthMissing",
    "CONFLICT_SUFFIX",
    "CloudService",
    "DropboxService",
    "Event",
    "EventType",
    "FileDescriptor",
    "FileSystemService",
    "InMemoryCloudService",
    "NEVER",
    "NotesManager",
    "ProviderUnavailable",
    "ReplicationError",
    "ReplicationReport",
    "Replicator",
    "ReplicatorObserver",
    "ReplicatorState",
    "Settings",
    "Side",
    "TransferFailure",
    "format_conflict_diff",
    "format_replication_report",
    "format_status",
    "report_to_json",
]
