"""
Hierarchical YAML configuration loader for filenotes_sync.

Finds config files by convention, expands ``!include`` directives and
``${VAR}`` references, then merges the files so that the project-level
file wins over the user-level one.

Usage:
    from filenotes_sync.config_loader import load_hierarchical_config

    raw = load_hierarchical_config()
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".filenotes"

# ${VAR} or ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+?)(?::-(.*?))?\}")


# ---------------------------------------------------------------------------
# Env var interpolation
# ---------------------------------------------------------------------------


def interpolate_env_vars(value: str) -> str:
    """Expand ``${VAR}`` and ``${VAR:-default}`` inside *value*.

    An unset or empty variable expands to its default, or to ``""`` when
    no default is given.
    """

    def _sub(match: re.Match) -> str:
        current = os.environ.get(match.group(1))
        if current:
            return current
        return match.group(2) or ""

    return _ENV_VAR_PATTERN.sub(_sub, value)


def _interpolate_recursive(obj: Any) -> Any:
    if isinstance(obj, str):
        return interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {key: _interpolate_recursive(val) for key, val in obj.items()}
    if isinstance(obj, list):
        return [_interpolate_recursive(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# YAML !include support
# ---------------------------------------------------------------------------


class ConfigLoader(yaml.SafeLoader):
    """SafeLoader subclass that understands ``!include other.yml``.

    Registering the constructor on a subclass leaves ``yaml.SafeLoader``
    itself untouched.
    """


def _include_constructor(loader: ConfigLoader, node: yaml.ScalarNode) -> Any:
    target = Path(loader.construct_scalar(node))
    if not target.is_absolute():
        target = Path(loader.name).resolve().parent / target
    target = target.resolve()

    seen: list[Path] = getattr(loader, "_include_stack", [])
    if target in seen:
        chain = " -> ".join(str(p) for p in [*seen, target])
        raise ValueError(f"Circular include detected: {chain}")
    if not target.exists():
        raise FileNotFoundError(
            f"Include file not found: {target} "
            f"(referenced from {Path(loader.name).resolve()})"
        )
    return _load_yaml_with_includes(target, _include_stack=[*seen, target])


ConfigLoader.add_constructor("!include", _include_constructor)


def _load_yaml_with_includes(
    path: Path, *, _include_stack: list[Path] | None = None
) -> Any:
    path = path.resolve()
    with open(path, "r", encoding="utf-8") as fh:
        loader = ConfigLoader(fh)
        loader._include_stack = _include_stack or [path]  # type: ignore[attr-defined]
        try:
            return loader.get_single_data()
        finally:
            loader.dispose()


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def discover_config_files() -> list[Path]:
    """Return existing config files, highest precedence first.

    Search order:
        1. ``FILENOTES_CONFIG`` env var (explicit single path)
        2. ``.filenotes/config.yml`` in CWD
        3. ``.filenotes/config.yaml`` in CWD
        4. ``~/.config/filenotes/config.yml``
    """
    candidates: list[Path] = []

    explicit = os.environ.get("FILENOTES_CONFIG")
    if explicit:
        candidates.append(Path(explicit).expanduser().resolve())

    project_dir = Path.cwd() / CONFIG_DIR_NAME
    candidates.append(project_dir / "config.yml")
    candidates.append(project_dir / "config.yaml")
    candidates.append(Path.home() / ".config" / "filenotes" / "config.yml")

    return [p for p in candidates if p.exists()]


_STARTER_CONFIG = """\
# filenotes-sync configuration
#
# Values can also come from environment variables:
#   FILENOTES_NOTES_DIR, FILENOTES_STATE_DIR, DROPBOX_ACCESS_TOKEN,
#   DROPBOX_APP_KEY, FILENOTES_TIMEOUT
#
# storage:
#   notes_dir: ~/Notes
#   state_dir: ~/.filenotes
#
# dropbox:
#   access_token: ${DROPBOX_ACCESS_TOKEN}
#   app_key: your-app-key
#   timeout: 60
#
# logging:
#   level: INFO
"""


def ensure_config(target: Path | None = None) -> Path:
    """Return the active config file, writing a commented starter file if none exists.

    Args:
        target: Where to create the starter file. Defaults to
            ``CWD / .filenotes / config.yml``.
    """
    existing = discover_config_files()
    if existing:
        logger.debug("Config file already exists: %s", existing[0])
        return existing[0]

    config_path = target or Path.cwd() / CONFIG_DIR_NAME / "config.yml"
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(_STARTER_CONFIG, encoding="utf-8")
    logger.info("Created starter config: %s", config_path)
    return config_path


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def load_hierarchical_config() -> dict[str, Any]:
    """Load and merge all discovered config files.

    Files are applied from lowest to highest precedence; each file's
    top-level keys replace those of earlier files. Env var interpolation
    runs after the merge. Returns ``{}`` when no file exists.
    """
    paths = discover_config_files()
    if not paths:
        logger.debug("No config files found, using zero-config defaults")
        return {}

    merged: dict[str, Any] = {}
    for path in reversed(paths):
        logger.debug("Loading config: %s", path)
        try:
            data = _load_yaml_with_includes(path)
        except Exception:
            logger.exception("Failed to load config file %s", path)
            raise

        if isinstance(data, dict):
            merged.update(data)
        elif data is not None:
            logger.warning(
                "Config file %s has non-dict root (%s), skipping",
                path,
                type(data).__name__,
            )

    return _interpolate_recursive(merged)
