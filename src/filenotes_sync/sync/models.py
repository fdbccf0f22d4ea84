"""Pydantic models for the notes replicator.

Defines the core data contracts used across all sync modules:

- ``Side``: Which endpoint a file belongs to.
- ``FileDescriptor``: Metadata for one file on one side.
- ``EventType`` / ``Event``: Decision notifications sent to observers.
- ``ReplicationReport``: Outcome of one ``Replicator.invoke()`` run.

All models are frozen (immutable) for safety.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Side(str, Enum):
    """The endpoint a descriptor was enumerated from."""

    LOCAL = "local"
    REMOTE = "remote"


class FileDescriptor(BaseModel):
    """One file as seen by an enumerator.

    Attributes:
        name: Leaf file name, the sole correlation key between sides.
        size: Size in bytes.
        last_modified: Timezone-aware modification instant on its side.
        path: Display location used in event messages.
        side: Which endpoint produced this descriptor.
        handle: Opaque value the originating service needs to act on
            the file later (a ``Path`` locally, a provider path remotely).
    """

    name: str
    size: int = Field(ge=0)
    last_modified: datetime
    path: str
    side: Side
    handle: Any = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


class EventType(str, Enum):
    """Kinds of change the replicator reports."""

    LOCAL_UPDATE = "LocalUpdate"
    LOCAL_DELETE = "LocalDelete"
    REMOTE_UPDATE = "RemoteUpdate"
    REMOTE_DELETE = "RemoteDelete"

    @property
    def label(self) -> str:
        return _EVENT_LABELS[self]


_EVENT_LABELS = {
    EventType.LOCAL_UPDATE: "Local update",
    EventType.LOCAL_DELETE: "Local delete",
    EventType.REMOTE_UPDATE: "Remote update",
    EventType.REMOTE_DELETE: "Remote delete",
}


class Event(BaseModel):
    """A single applied replication decision."""

    type: EventType
    path: str

    model_config = {"frozen": True}

    def message(self) -> str:
        """Return e.g. ``"Remote update: /home/me/Notes/todo.txt"``."""
        return f"{self.type.label}: {self.path}"


class ReplicationReport(BaseModel):
    """Aggregate outcome of one replication run.

    Attributes:
        mode: ``"first"`` or ``"incremental"``; ``None`` when skipped
            before an algorithm was chosen.
        checkpoint: ISO 8601 ``last_sync`` the run compared against, or
            ``None`` for a first sync.
        events: Events emitted, in emission order.
        conflicts: Names of the ``.conflict`` files written.
        success: True when the run completed and advanced the checkpoint.
        error: Error message if the run aborted.
        skipped: Reason the run did not reconcile at all.
        started_at: ISO 8601 timestamp when the run started.
        completed_at: ISO 8601 timestamp when the run ended.
    """

    mode: str | None = None
    checkpoint: str | None = None
    events: list[Event] = []
    conflicts: list[str] = []
    success: bool = False
    error: str | None = None
    skipped: str | None = None
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    def _of_type(self, event_type: EventType) -> list[Event]:
        return [e for e in self.events if e.type == event_type]

    @property
    def local_updates(self) -> list[Event]:
        return self._of_type(EventType.LOCAL_UPDATE)

    @property
    def local_deletes(self) -> list[Event]:
        return self._of_type(EventType.LOCAL_DELETE)

    @property
    def remote_updates(self) -> list[Event]:
        return self._of_type(EventType.REMOTE_UPDATE)

    @property
    def remote_deletes(self) -> list[Event]:
        return self._of_type(EventType.REMOTE_DELETE)

    @property
    def update_count(self) -> int:
        """Number of applied modifications (one per event)."""
        return len(self.events)

    def summary(self) -> str:
        """Format a human-readable summary of the run.

        Returns:
            Multi-line summary string with counts by event type.
        """
        if self.skipped:
            return f"Replication skipped: {self.skipped}"
        status = "completed" if self.success else "failed"
        lines = [
            f"Replication {status} ({self.mode or 'n/a'} sync)",
            f"  Downloaded:     {len(self.local_updates)}",
            f"  Uploaded:       {len(self.remote_updates)}",
            f"  Deleted local:  {len(self.local_deletes)}",
            f"  Deleted remote: {len(self.remote_deletes)}",
            f"  Conflicts:      {len(self.conflicts)}",
            f"  Total:          {self.update_count}",
        ]
        if self.error:
            lines.append(f"  Error:          {self.error}")
        return "\n".join(lines)
