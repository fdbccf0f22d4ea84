"""Logging setup for the CLI and the MCP server.

The CLI logs to stderr, plus an optional file. The MCP server shares
stdout with JSON-RPC traffic, so it only ever logs to a file.

Level resolution, highest first: ``--debug`` or ``FILENOTES_DEBUG``,
``LOG_LEVEL``, the config file's ``logging.level``, then the mode default
(INFO for the CLI, WARNING for MCP).  The two config-derived settings are
applied by ``apply_configured_level`` once config is resolved.
"""

import json
import logging
import os
import sys

DEFAULT_LOG_FILE = "/tmp/filenotes-sync.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_QUIET_LOGGERS = ("urllib3", "requests", "httpx")


class JsonFormatter(logging.Formatter):
    """One JSON object per record: ``ts``, ``level``, ``logger``, ``msg`` and ``exc``."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _formatter(debug_format: str, with_name: bool) -> logging.Formatter:
    if debug_format == "json":
        return JsonFormatter(datefmt=DATE_FORMAT)
    name = " %(name)s" if with_name else ""
    return logging.Formatter(
        f"[%(asctime)s] [%(levelname)s]{name} %(message)s", datefmt=DATE_FORMAT
    )


def _resolve_level(mode: str, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    default = "WARNING" if mode == "mcp" else "INFO"
    name = os.getenv("LOG_LEVEL", default).upper()
    return getattr(logging, name, logging.INFO)


def setup_logging(
    mode: str = "cli",
    debug: bool = False,
    log_file: str | None = None,
    debug_format: str = "text",
) -> None:
    """Configure the root logger for *mode*.

    Args:
        mode: ``"cli"`` (stderr) or ``"mcp"`` (file only).
        debug: Force DEBUG regardless of ``LOG_LEVEL``.
        log_file: Extra file for CLI mode; the log file for MCP mode
            (falls back to ``LOG_FILE``, then ``DEFAULT_LOG_FILE``).
        debug_format: ``"text"`` or ``"json"``.
    """
    level = _resolve_level(mode, debug)

    if mode == "mcp":
        logging.basicConfig(
            level=level,
            format="[%(asctime)s] [%(levelname)s] %(message)s",
            datefmt=DATE_FORMAT,
            filename=log_file or os.getenv("LOG_FILE", DEFAULT_LOG_FILE),
            filemode="a",
        )
    else:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(_formatter(debug_format, with_name=False))
        handlers: list[logging.Handler] = [stderr_handler]
        if log_file:
            file_handler = logging.FileHandler(log_file, mode="a")
            file_handler.setFormatter(_formatter(debug_format, with_name=True))
            handlers.append(file_handler)
        logging.basicConfig(level=level, handlers=handlers)

    if level != logging.DEBUG:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def apply_configured_level(level: str | None, debug: bool = False) -> None:
    """Apply the log settings that only exist once config is resolved.

    *debug* (``FILENOTES_DEBUG``) switches the root logger to DEBUG and
    lets the HTTP client loggers through.  *level* is ``logging.level``
    from the config file; it is ignored when ``LOG_LEVEL`` is set or the
    root logger is already at DEBUG.
    """
    root = logging.getLogger()
    if debug:
        root.setLevel(logging.DEBUG)
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.NOTSET)
        return
    if not level or os.getenv("LOG_LEVEL"):
        return
    if root.level == logging.DEBUG:
        return
    resolved = getattr(logging, level.upper(), None)
    if isinstance(resolved, int):
        root.setLevel(resolved)
