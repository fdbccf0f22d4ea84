"""Tests for file_handler: note names, decode_note and atomic writes."""

from pathlib import Path
from unittest.mock import patch

import pytest

from filenotes_sync.file_handler import (
    decode_note,
    is_temp_file,
    validate_note_name,
    write_bytes_atomic,
)

# =============================================================================
# validate_note_name
# =============================================================================


class TestValidateNoteName:
    def test_plain_name_returned(self):
        assert validate_note_name("todo.txt") == "todo.txt"

    def test_dotfile_allowed(self):
        assert validate_note_name(".hidden") == ".hidden"

    @pytest.mark.parametrize("name", ["", ".", ".."])
    def test_empty_and_dot_entries_rejected(self, name):
        with pytest.raises(ValueError, match="Invalid note name"):
            validate_note_name(name)

    @pytest.mark.parametrize("name", ["a/b", "a\\b", "/abs"])
    def test_separators_rejected(self, name):
        with pytest.raises(ValueError, match="directory separators"):
            validate_note_name(name)


# =============================================================================
# decode_note
# =============================================================================


class TestReadFileWithEncoding:
    def test_utf8_file(self, tmp_path):
        f = tmp_path / "utf8.txt"
        f.write_text("Hello wörld", encoding="utf-8")
        content, _ = decode_note(f)
        assert content == "Hello wörld"

    def test_ascii_reported_as_utf8(self, tmp_path):
        f = tmp_path / "plain.txt"
        f.write_bytes(b"just ascii text here")
        content, encoding = decode_note(f)
        assert content == "just ascii text here"
        assert encoding in ("utf-8", "utf_8")

    def test_empty_file(self, tmp_path):
        f = tmp_path / "empty.txt"
        f.write_bytes(b"")
        assert decode_note(f) == ("", "utf-8")


# =============================================================================
# write_bytes_atomic
# =============================================================================


class TestWriteBytesAtomic:
    def test_write_basic(self, tmp_path):
        f = tmp_path / "out.txt"
        assert write_bytes_atomic(f, b"abc") == 3
        assert f.read_bytes() == b"abc"

    def test_creates_parent_directories(self, tmp_path):
        f = tmp_path / "a" / "b" / "out.txt"
        write_bytes_atomic(f, b"x")
        assert f.exists()

    def test_replaces_and_leaves_no_temp_file(self, tmp_path):
        f = tmp_path / "out.txt"
        f.write_bytes(b"old and long")
        write_bytes_atomic(f, b"new")
        assert f.read_bytes() == b"new"
        assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]

    def test_temp_file_is_recognised_and_removed_on_failure(self, tmp_path):
        seen = []

        def _crash(src, dst):
            seen.append(Path(src).name)
            raise OSError("disk full")

        with patch("filenotes_sync.file_handler.os.replace", _crash):
            with pytest.raises(OSError, match="disk full"):
                write_bytes_atomic(tmp_path / "out.txt", b"x")

        assert len(seen) == 1
        assert is_temp_file(seen[0])
        assert list(tmp_path.iterdir()) == []


class TestIsTempFile:
    @pytest.mark.parametrize(
        "name, expected",
        [
            (".filenotes-a1b2c3.tmp", True),
            ("draft.tmp", False),
            (".filenotes-notes.txt", False),
            ("todo.txt", False),
        ],
    )
    def test_names(self, name, expected):
        assert is_temp_file(name) is expected
