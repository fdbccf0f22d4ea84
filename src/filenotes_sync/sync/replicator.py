"""Reconcile the local notes directory with the remote folder.

The ``Replicator`` ties the local file service, a cloud facade and the
persisted settings into one replication run.  It:

1. Enumerates the local files, then the remote files.
2. Picks the algorithm: *first sync* when ``last_sync`` is ``NEVER``,
   *incremental sync* otherwise.
3. Walks the local snapshot, then the remote-only files, applying one
   decision per name and broadcasting an event for every change.
4. On clean completion records "now" as the new checkpoint and clears the
   ``replication_required`` flag.

Files are correlated by name only and modification times from both sides
are compared as if they came from one clock.

Error handling is per-run: the first unhandled error aborts the run,
leaves the checkpoint untouched and keeps whatever was already applied.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from filenotes_sync.sync.cloud import CloudService
from filenotes_sync.sync.local import FileSystemService
from filenotes_sync.sync.models import (
    Event,
    EventType,
    FileDescriptor,
    ReplicationReport,
)
from filenotes_sync.sync.notes import CONFLICT_SUFFIX, NotesManager
from filenotes_sync.sync.settings import NEVER, Settings

logger = logging.getLogger(__name__)

# At most one run per process, whichever Replicator instance starts it.
_RUN_LOCK = threading.Lock()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReplicatorObserver(Protocol):
    """Receives each event synchronously, in emission order."""

    def update(self, source: Replicator, event: Event) -> None:
        ...  # pragma: no cover


@dataclass
class ReplicatorState:
    """Snapshots and accumulators for one run."""

    local_files: list[FileDescriptor] = field(default_factory=list)
    remote_files: list[FileDescriptor] = field(default_factory=list)
    downloads: list[FileDescriptor] = field(default_factory=list)
    uploads: list[FileDescriptor] = field(default_factory=list)
    local_deletes: list[FileDescriptor] = field(default_factory=list)
    remote_deletes: list[FileDescriptor] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)

    @property
    def update_count(self) -> int:
        return (
            len(self.downloads)
            + len(self.uploads)
            + len(self.local_deletes)
            + len(self.remote_deletes)
        )

    def find_local(self, name: str) -> FileDescriptor | None:
        return next((f for f in self.local_files if f.name == name), None)

    def find_remote(self, name: str) -> FileDescriptor | None:
        return next((f for f in self.remote_files if f.name == name), None)


class Replicator:
    """Run replication between the notes directory and a cloud service.

    Args:
        cloud: Any ``CloudService`` implementation.
        filesystem: Service owning the managed directory.
        settings: Store for the ``last_sync`` checkpoint.
        notes: Notes manager whose dirty bit is cleared after a run.
        clock: Source of "now" for the checkpoint.
    """

    def __init__(
        self,
        cloud: CloudService,
        filesystem: FileSystemService,
        settings: Settings,
        notes: NotesManager,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.cloud = cloud
        self.filesystem = filesystem
        self.settings = settings
        self.notes = notes
        self.clock = clock
        self.observers: list[ReplicatorObserver] = []
        self.state = ReplicatorState()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def add_observer(self, observer: ReplicatorObserver) -> None:
        self.observers.append(observer)

    def _raise_event(self, event: Event) -> None:
        self.state.events.append(event)
        for observer in self.observers:
            try:
                observer.update(self, event)
            except Exception:
                logger.exception(
                    "Observer %r failed handling %s", observer, event.message()
                )

    def update_count(self) -> int:
        """Total modifications applied by the most recent run."""
        return self.state.update_count

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def invoke(self, full: bool = False) -> ReplicationReport | None:
        """Execute one replication run.

        Args:
            full: Ignore the stored checkpoint and run a first sync.  The
                checkpoint is only replaced if that run completes.

        Returns:
            A ``ReplicationReport``, or ``None`` if another run is already
            in progress in this process.
        """
        if not _RUN_LOCK.acquire(blocking=False):
            logger.debug("Replication already running, ignoring invoke()")
            return None
        try:
            return self._invoke(full)
        finally:
            _RUN_LOCK.release()

    def _invoke(self, full: bool) -> ReplicationReport:
        started_at = self.clock().isoformat()
        logger.info("Replication starting")
        self.state = ReplicatorState()

        if not self.cloud.is_authenticated():
            logger.warning("Cloud service not authenticated; skipping replication")
            return ReplicationReport(
                skipped="not authenticated",
                started_at=started_at,
                completed_at=self.clock().isoformat(),
            )

        mode: str | None = None
        checkpoint: str | None = None
        error: str | None = None

        try:
            self._load_local_files()
            self._load_remote_files()

            if full:
                logger.info("Full sync requested; ignoring the checkpoint")
            last_sync = NEVER if full else self.settings.get_last_sync()
            if last_sync == NEVER:
                mode = "first"
                logger.debug("First sync")
                self._first_sync()
            else:
                mode = "incremental"
                checkpoint = last_sync.isoformat()
                logger.debug("Incremental sync (previous success: %s)", checkpoint)
                self._sync(last_sync)

            # Downloads stamped local files with times during this run, so
            # the checkpoint must be taken only now.
            self.settings.set_last_sync(self.clock())
            self.notes.set_replication_required(False)
        except Exception as exc:
            logger.error("Replication failed: %s", exc)
            error = str(exc) or type(exc).__name__

        report = ReplicationReport(
            mode=mode,
            checkpoint=checkpoint,
            events=list(self.state.events),
            conflicts=list(self.state.conflicts),
            success=error is None,
            error=error,
            started_at=started_at,
            completed_at=self.clock().isoformat(),
        )
        logger.info(
            "Replication %s: %d changes, %d conflicts",
            "completed" if report.success else "aborted",
            report.update_count,
            len(report.conflicts),
        )
        return report

    def _load_local_files(self) -> None:
        self.state.local_files = list(self.filesystem.files())
        logger.debug("Loaded %d local files", len(self.state.local_files))

    def _load_remote_files(self) -> None:
        self.state.remote_files = list(self.cloud.files())
        logger.debug("Loaded %d remote files", len(self.state.remote_files))

    # ------------------------------------------------------------------
    # Algorithms
    # ------------------------------------------------------------------

    def _first_sync(self) -> None:
        """No checkpoint: last write wins per name and nothing is deleted."""
        for local in self.state.local_files:
            remote = self.state.find_remote(local.name)

            if remote is None:
                logger.debug("first sync: %s: remote missing", local.name)
                self._upload(local)
            elif local.last_modified > remote.last_modified:
                logger.debug("first sync: %s: local is newer", local.name)
                self._upload(local)
            elif local.last_modified < remote.last_modified:
                logger.debug("first sync: %s: remote is newer", local.name)
                self._download(remote)
            elif local.size == remote.size:
                logger.debug("first sync: %s: same age and size", local.name)
            else:
                logger.debug("first sync: %s: same age, different size", local.name)
                self._resolve_conflict(local, remote)

        for remote in self.state.remote_files:
            if self.state.find_local(remote.name) is None:
                logger.debug("first sync: %s: local missing", remote.name)
                self._download(remote)

    def _sync(self, last_sync: datetime) -> None:
        """Checkpoint known: anything modified after it counts as changed."""
        for local in self.state.local_files:
            remote = self.state.find_remote(local.name)
            local_changed = local.last_modified > last_sync

            if not local_changed:
                if remote is None:
                    self._delete_local(local)
                elif remote.last_modified > last_sync:
                    self._download(remote)
                else:
                    logger.debug("sync: %s: skip", local.name)
            elif remote is None or remote.last_modified <= last_sync:
                self._upload(local)
            else:
                self._resolve_conflict(local, remote)

        for remote in self.state.remote_files:
            if self.state.find_local(remote.name) is not None:
                continue
            if remote.last_modified <= last_sync:
                self._delete_remote(remote)
            else:
                self._download(remote)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def _download(self, remote: FileDescriptor) -> None:
        logger.info("Downloading %s", remote.name)
        self.cloud.download(remote)
        self.state.downloads.append(remote)
        self._raise_event(Event(type=EventType.LOCAL_UPDATE, path=remote.path))

    def _upload(self, local: FileDescriptor) -> None:
        logger.info("Uploading %s", local.name)
        self.cloud.upload(local)
        self.state.uploads.append(local)
        self._raise_event(Event(type=EventType.REMOTE_UPDATE, path=local.path))

    def _delete_local(self, local: FileDescriptor) -> None:
        logger.info("Deleting local %s", local.name)
        self.filesystem.delete(local.name)
        self.state.local_deletes.append(local)
        self._raise_event(Event(type=EventType.LOCAL_DELETE, path=local.path))

    def _delete_remote(self, remote: FileDescriptor) -> None:
        logger.info("Deleting remote %s", remote.name)
        self.cloud.delete(remote)
        self.state.remote_deletes.append(remote)
        self._raise_event(Event(type=EventType.REMOTE_DELETE, path=remote.path))

    def _resolve_conflict(
        self, local: FileDescriptor, remote: FileDescriptor
    ) -> None:
        # Keep the local file; the remote copy lands beside it. No event is
        # raised: the new file is picked up as local-only on the next run.
        conflict_name = local.name + CONFLICT_SUFFIX
        logger.info("Conflict on %s, saving remote copy as %s", remote.name, conflict_name)
        self.cloud.download(remote, rename_to=conflict_name)
        self.state.conflicts.append(conflict_name)
