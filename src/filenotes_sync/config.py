"""Runtime configuration for the notes replicator.

Reads settings from CLI args, environment variables, .env files, and
YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    FILENOTES_NOTES_DIR: Managed notes directory (required)
    FILENOTES_STATE_DIR: Where settings.json lives (optional, default: ~/.filenotes)
    DROPBOX_ACCESS_TOKEN: Dropbox OAuth2 bearer token (optional)
    DROPBOX_APP_KEY: Dropbox app key for the authorization URL (optional)
    FILENOTES_TIMEOUT: HTTP timeout in seconds (optional, default: 60)
    FILENOTES_DEBUG: Enable debug logging (optional, default: false)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_STATE_DIR = "~/.filenotes"


@dataclass
class Config:
    notes_dir: str
    state_dir: str = DEFAULT_STATE_DIR
    access_token: str | None = None
    app_key: str | None = None
    timeout: int = 60
    debug: bool = False
    log_level: str | None = None

    @property
    def notes_path(self) -> Path:
        return Path(self.notes_dir).expanduser()

    @property
    def state_path(self) -> Path:
        return Path(self.state_dir).expanduser()


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If the notes directory is unset or not a directory,
            or the timeout is out of range.
    """
    config.notes_dir = config.notes_dir.strip()

    if not config.notes_dir:
        raise ValueError(
            "Notes directory cannot be empty. Set FILENOTES_NOTES_DIR environment variable."
        )

    if config.notes_path.exists() and not config.notes_path.is_dir():
        raise ValueError(
            f"Invalid notes directory '{config.notes_dir}': not a directory"
        )

    if not (1 <= config.timeout <= 600):
        raise ValueError(
            f"Invalid timeout '{config.timeout}': must be a number between 1 and 600"
        )

    if not config.access_token:
        logger.debug(
            "No Dropbox access token configured; replication needs a login"
        )


def load_config(
    notes_dir: str | None = None,
    state_dir: str | None = None,
    access_token: str | None = None,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        notes_dir: Override notes directory.
        state_dir: Override state directory.
        access_token: Override Dropbox access token.
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Flattened values from the YAML config file, as
            produced by ``UnifiedConfig.fallbacks()``.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If the notes directory is missing after checking all
            sources, or a numeric value is invalid.
    """
    fb = yaml_fallbacks or {}

    final_notes_dir = (
        notes_dir or os.getenv("FILENOTES_NOTES_DIR") or fb.get("notes_dir")
    )
    if not final_notes_dir:
        raise ValueError(
            "Notes directory not found. Set FILENOTES_NOTES_DIR environment variable, "
            "pass --notes-dir CLI argument, or add 'storage.notes_dir' to config.yml."
        )

    final_state_dir = (
        state_dir
        or os.getenv("FILENOTES_STATE_DIR")
        or fb.get("state_dir")
        or DEFAULT_STATE_DIR
    )

    final_token = (
        access_token
        or os.getenv("DROPBOX_ACCESS_TOKEN")
        or fb.get("access_token")
    )
    final_app_key = os.getenv("DROPBOX_APP_KEY") or fb.get("app_key")

    timeout_raw = os.getenv("FILENOTES_TIMEOUT")
    if timeout_raw is not None:
        try:
            final_timeout = int(timeout_raw)
        except ValueError:
            raise ValueError(
                f"Invalid FILENOTES_TIMEOUT '{timeout_raw}': must be a number between 1 and 600"
            ) from None
    elif "timeout" in fb:
        final_timeout = int(fb["timeout"])
    else:
        final_timeout = 60

    if debug:
        final_debug = True
    else:
        env_debug = os.getenv("FILENOTES_DEBUG")
        final_debug = env_debug is not None and env_debug.lower() in (
            "true",
            "1",
            "yes",
            "on",
        )

    config = Config(
        notes_dir=final_notes_dir,
        state_dir=final_state_dir,
        access_token=final_token,
        app_key=final_app_key,
        timeout=final_timeout,
        debug=final_debug,
        log_level=fb.get("log_level"),
    )

    validate_config(config)

    return config
