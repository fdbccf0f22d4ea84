"""Filesystem helpers for note files."""

import os
import tempfile
from pathlib import Path

from charset_normalizer import from_bytes

# Names of in-flight temporary files created by write_bytes_atomic
TEMP_PREFIX = ".filenotes-"
TEMP_SUFFIX = ".tmp"


def validate_note_name(name: str) -> str:
    """Validate a leaf file name inside the flat notes directory.

    Args:
        name: Candidate file name.

    Returns:
        The name unchanged.

    Raises:
        ValueError: If the name is empty, a dot entry, or contains a
            directory separator.
    """
    if not name or name in (".", ".."):
        raise ValueError(f"Invalid note name: {name!r}")
    if "/" in name or "\\" in name or os.sep in name:
        raise ValueError(
            f"Note name must not contain directory separators: {name!r}"
        )
    return name


def decode_note(path: Path) -> tuple[str, str]:
    """Return ``(text, encoding)`` for a note of unknown encoding.

    Notes arrive from other devices as raw bytes, so the encoding is
    guessed with charset-normalizer.  Empty or undetectable files decode as
    UTF-8, with undecodable bytes replaced.
    """
    raw = path.read_bytes()
    if not raw:
        return ("", "utf-8")

    result = from_bytes(raw).best()
    if result is None:
        return (raw.decode("utf-8", errors="replace"), "utf-8")
    # ascii is reported for plain text; treat it as utf-8
    encoding = "utf-8" if result.encoding == "ascii" else result.encoding
    return (str(result), encoding)


def is_temp_file(name: str) -> bool:
    """True for a leftover of an interrupted ``write_bytes_atomic``."""
    return name.startswith(TEMP_PREFIX) and name.endswith(TEMP_SUFFIX)


def write_bytes_atomic(path: Path, data: bytes) -> int:
    """Replace *path* with *data* so readers never see a partial file.

    Writes to a temporary file in the same directory, then ``os.replace``.
    The resulting file's modification time is the moment of the write.

    Returns:
        Number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent), prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    return len(data)
