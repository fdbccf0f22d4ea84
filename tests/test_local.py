"""Tests for FileSystemService, the local side of replication."""

from __future__ import annotations

import os
from datetime import datetime, timezone

import pytest

from filenotes_sync.sync.local import FileSystemService
from filenotes_sync.sync.models import Side


class TestFiles:
    def test_missing_directory_yields_empty_list(self, tmp_path):
        service = FileSystemService(tmp_path / "does-not-exist")
        assert service.files() == []

    def test_lists_regular_files_sorted_by_name(self, filesystem, notes_dir):
        (notes_dir / "b.txt").write_text("bb")
        (notes_dir / "a.txt").write_text("a")

        names = [f.name for f in filesystem.files()]

        assert names == ["a.txt", "b.txt"]

    def test_descriptor_fields(self, filesystem, notes_dir):
        path = notes_dir / "todo.txt"
        path.write_bytes(b"12345")
        when = datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)
        os.utime(path, (when.timestamp(), when.timestamp()))

        (descriptor,) = filesystem.files()

        assert descriptor.name == "todo.txt"
        assert descriptor.size == 5
        assert descriptor.last_modified == when
        assert descriptor.path == str(path)
        assert descriptor.side == Side.LOCAL
        assert descriptor.handle == path

    def test_skips_subdirectories(self, filesystem, notes_dir):
        (notes_dir / "sub").mkdir()
        (notes_dir / "sub" / "nested.txt").write_text("x")
        (notes_dir / "top.txt").write_text("x")

        assert [f.name for f in filesystem.files()] == ["top.txt"]

    def test_skips_symlinks(self, filesystem, notes_dir, tmp_path):
        target = tmp_path / "outside.txt"
        target.write_text("x")
        (notes_dir / "link.txt").symlink_to(target)

        assert filesystem.files() == []

    def test_skips_leftover_temp_files(self, filesystem, notes_dir):
        (notes_dir / ".filenotes-k2j9x1.tmp").write_bytes(b"half a no")
        (notes_dir / "draft.tmp").write_text("kept")

        assert [f.name for f in filesystem.files()] == ["draft.tmp"]


class TestMutations:
    def test_write_creates_directory_and_file(self, tmp_path):
        service = FileSystemService(tmp_path / "fresh")

        path = service.write("n.txt", b"data")

        assert path.read_bytes() == b"data"

    def test_write_replaces_existing_content(self, filesystem, notes_dir):
        (notes_dir / "n.txt").write_bytes(b"old content")

        filesystem.write("n.txt", b"new")

        assert (notes_dir / "n.txt").read_bytes() == b"new"
        # No temp files left behind
        assert [p.name for p in notes_dir.iterdir()] == ["n.txt"]

    def test_read(self, filesystem, notes_dir):
        (notes_dir / "n.txt").write_bytes(b"\x00\x01")
        assert filesystem.read("n.txt") == b"\x00\x01"

    def test_delete(self, filesystem, notes_dir):
        (notes_dir / "n.txt").write_text("x")
        filesystem.delete("n.txt")
        assert not (notes_dir / "n.txt").exists()

    def test_delete_missing_is_noop(self, filesystem):
        filesystem.delete("never-existed.txt")

    @pytest.mark.parametrize("name", ["", ".", "..", "a/b.txt", "../x"])
    def test_rejects_names_outside_directory(self, filesystem, name):
        with pytest.raises(ValueError):
            filesystem.write(name, b"x")
