"""Command-line entry point: ``filenotes-sync``.

Subcommands:

- ``sync``       run one replication and print the report
- ``status``     show checkpoint, pending flag, session and conflicts
- ``login``      start provider authorization
- ``logout``     forget the stored provider token
- ``conflicts``  list ``.conflict`` files, optionally with diffs
- ``init``       write a starter config file

Modification times from this machine and from the provider are compared
directly, so a badly skewed clock on either side can make a stale copy
look newer.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from . import __version__
from .config_loader import ensure_config
from .logger import apply_configured_level, setup_logging
from .services import Services, create_services, resolve_config
from .sync.errors import ReplicationError
from .sync.models import Event
from .sync.replicator import Replicator
from .sync.reporter import (
    format_conflict_diff,
    format_replication_report,
    format_status,
    report_to_json,
)

logger = logging.getLogger(__name__)


class EchoObserver:
    """Print each replication event as it happens."""

    def __init__(self, stream=None) -> None:
        self.stream = stream or sys.stdout

    def update(self, source: Replicator, event: Event) -> None:
        print(event.message(), file=self.stream, flush=True)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_sync(services: Services, args: argparse.Namespace) -> int:
    if not args.json:
        services.replicator.add_observer(EchoObserver())

    report = services.replicator.invoke(full=args.full)
    if report is None:
        print("A replication run is already in progress.", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report_to_json(report), indent=2))
    else:
        print(format_replication_report(report))

    if report.skipped:
        print("Run 'filenotes-sync login' first.", file=sys.stderr)
        return 1
    return 0 if report.success else 1


def cmd_status(services: Services, args: argparse.Namespace) -> int:
    status = services.status()
    if args.json:
        print(json.dumps(status, indent=2))
    else:
        print(format_status(status))
    return 0


def cmd_login(services: Services, args: argparse.Namespace) -> int:
    url = services.cloud.login()
    if url is None:
        print("Already authenticated.")
        return 0
    print("Open this URL to authorize filenotes-sync:")
    print(f"  {url}")
    print("Then set DROPBOX_ACCESS_TOKEN (or dropbox.access_token) to the issued token.")
    return 0


def cmd_logout(services: Services, args: argparse.Namespace) -> int:
    services.cloud.logout()
    print("Logged out.")
    return 0


def cmd_conflicts(services: Services, args: argparse.Namespace) -> int:
    names = services.notes.conflicts()
    if not names:
        print("No conflicts.")
        return 0
    for name in names:
        if args.diff:
            print(format_conflict_diff(services.notes, name))
            print()
        else:
            print(name)
    return 0


COMMANDS = {
    "sync": cmd_sync,
    "status": cmd_status,
    "login": cmd_login,
    "logout": cmd_logout,
    "conflicts": cmd_conflicts,
}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filenotes-sync",
        description="Replicate a local notes directory with a Dropbox app folder",
        epilog=(
            "Note: local and remote modification times are compared as if "
            "they came from one clock."
        ),
    )
    parser.add_argument(
        "--notes-dir",
        help="Override notes directory (takes precedence over FILENOTES_NOTES_DIR and config files)",
    )
    parser.add_argument(
        "--state-dir",
        help="Override settings directory (takes precedence over FILENOTES_STATE_DIR)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument(
        "--version",
        action="version",
        version=f"filenotes-sync version {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p_sync = sub.add_parser("sync", help="Run one replication")
    p_sync.add_argument(
        "--json", action="store_true", help="Print the report as JSON"
    )
    p_sync.add_argument(
        "--full",
        action="store_true",
        help="Ignore the checkpoint and run a first sync (newest wins, nothing deleted)",
    )

    p_status = sub.add_parser("status", help="Show replication status")
    p_status.add_argument(
        "--json", action="store_true", help="Print status as JSON"
    )

    sub.add_parser("login", help="Start provider authorization")
    sub.add_parser("logout", help="Forget the stored provider token")

    p_conflicts = sub.add_parser("conflicts", help="List conflict files")
    p_conflicts.add_argument(
        "--diff", action="store_true", help="Show a diff for each conflict"
    )

    sub.add_parser(
        "init", help="Write a starter .filenotes/config.yml if none exists"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(mode="cli", debug=args.debug, log_file=args.log_file)

    if args.command == "init":
        # Runs before config resolution: there may be no notes_dir yet
        print(f"Config file: {ensure_config()}")
        return 0

    overrides = {}
    if args.notes_dir:
        overrides["notes_dir"] = args.notes_dir
    if args.state_dir:
        overrides["state_dir"] = args.state_dir
    if args.debug:
        overrides["debug"] = True

    try:
        config, sources = resolve_config(overrides)
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 1
    apply_configured_level(config.log_level, debug=config.debug)
    logger.debug("Configuration loaded from: %s", ", ".join(sources))

    services = create_services(config)
    try:
        return COMMANDS[args.command](services, args)
    except (ReplicationError, ValueError, OSError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


def run() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
