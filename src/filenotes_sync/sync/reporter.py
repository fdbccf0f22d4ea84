"""Replication report formatting functions.

Provides human-readable and machine-readable output for replication runs:

- ``format_replication_report`` -- full post-run summary.
- ``format_status`` -- checkpoint / dirty-bit / session overview.
- ``format_conflict_diff`` -- unified diff between a note and its
  ``.conflict`` sibling.
- ``report_to_json`` -- structured dict for MCP tool output.
"""

from __future__ import annotations

import difflib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ReplicationReport
    from .notes import NotesManager

from .notes import CONFLICT_SUFFIX

# ------------------------------------------------------------------
# Human-readable report
# ------------------------------------------------------------------


def format_replication_report(report: ReplicationReport) -> str:
    """Format a replication report as human-readable text.

    Event sections are only included when they contain at least one event.

    Args:
        report: The finished run's report.

    Returns:
        Multi-line formatted string.
    """
    if report.skipped:
        return f"Replication skipped: {report.skipped}"

    lines: list[str] = []
    header = "Replication report"
    if report.mode:
        header += f" ({report.mode} sync)"
    lines.append(header)
    lines.append(f"Started: {report.started_at}")
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")
    if report.checkpoint:
        lines.append(f"Previous sync: {report.checkpoint}")
    lines.append("")

    lines.append(
        f"Applied {report.update_count} changes: "
        f"{len(report.local_updates)} downloaded, "
        f"{len(report.remote_updates)} uploaded, "
        f"{len(report.local_deletes) + len(report.remote_deletes)} deleted, "
        f"{len(report.conflicts)} conflicts"
    )
    lines.append("")

    sections = [
        ("Downloaded:", report.local_updates),
        ("Uploaded:", report.remote_updates),
        ("Deleted locally:", report.local_deletes),
        ("Deleted remotely:", report.remote_deletes),
    ]
    for title, events in sections:
        if not events:
            continue
        lines.append(title)
        for event in events:
            lines.append(f"  {event.path}")
        lines.append("")

    if report.conflicts:
        lines.append("Conflicts (remote copy saved beside the note):")
        for name in report.conflicts:
            lines.append(f"  {name}")
        lines.append("")

    if report.error:
        lines.append(f"ERROR: {report.error}")
        lines.append("Checkpoint not advanced; the next run will retry.")
        lines.append("")

    return "\n".join(lines).rstrip()


def format_status(status: dict) -> str:
    """Format the dict produced by ``Services.status()``."""
    lines = [
        "Replication status",
        f"  Notes directory:      {status['notes_dir']}",
        f"  Last sync:            {status['last_sync'] or 'never'}",
        f"  Replication required: {'yes' if status['replication_required'] else 'no'}",
        f"  Authenticated:        {'yes' if status['authenticated'] else 'no'}",
        f"  Local notes:          {status['local_files']}",
        f"  Unresolved conflicts: {len(status['conflicts'])}",
    ]
    return "\n".join(lines)


# ------------------------------------------------------------------
# Conflict diff
# ------------------------------------------------------------------


def format_conflict_diff(notes: NotesManager, conflict_name: str) -> str:
    """Show how the preserved remote copy differs from the local note.

    Args:
        notes: Notes manager used to read both files.
        conflict_name: Name of the ``<note>.conflict`` file.

    Returns:
        Multi-line formatted string with a unified diff.
    """
    if not conflict_name.endswith(CONFLICT_SUFFIX):
        raise ValueError(f"Not a conflict file: {conflict_name}")
    original = conflict_name[: -len(CONFLICT_SUFFIX)]

    remote_text = notes.read_note(conflict_name)
    if original in notes.list_notes():
        local_text = notes.read_note(original)
    else:
        local_text = ""

    lines = [f"Conflict: {original} <-> {conflict_name}", ""]
    diff = "".join(
        difflib.unified_diff(
            local_text.splitlines(keepends=True),
            remote_text.splitlines(keepends=True),
            fromfile=f"local: {original}",
            tofile=f"remote: {conflict_name}",
        )
    )
    lines.append(diff.rstrip() if diff else "(no textual differences)")
    return "\n".join(lines)


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def report_to_json(report: ReplicationReport) -> dict:
    """Convert a replication report to a structured dict for JSON serialisation.

    Args:
        report: The replication report.

    Returns:
        Dict with run metadata, counts, and per-event details.
    """
    return {
        "mode": report.mode,
        "checkpoint": report.checkpoint,
        "success": report.success,
        "error": report.error,
        "skipped": report.skipped,
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "counts": {
            "total": report.update_count,
            "downloaded": len(report.local_updates),
            "uploaded": len(report.remote_updates),
            "deleted_local": len(report.local_deletes),
            "deleted_remote": len(report.remote_deletes),
            "conflicts": len(report.conflicts),
        },
        "events": [
            {"type": e.type.value, "path": e.path, "message": e.message()}
            for e in report.events
        ],
        "conflicts": list(report.conflicts),
    }
