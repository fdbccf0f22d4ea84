"""Shared pytest fixtures for filenotes-sync tests."""

import os
from datetime import datetime

import pytest

from filenotes_sync.config import Config
from filenotes_sync.sync.local import FileSystemService
from filenotes_sync.sync.memory import InMemoryCloudService
from filenotes_sync.sync.notes import NotesManager
from filenotes_sync.sync.replicator import Replicator
from filenotes_sync.sync.settings import Settings


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep the developer's own configuration out of every test."""
    for var in (
        "FILENOTES_NOTES_DIR",
        "FILENOTES_STATE_DIR",
        "FILENOTES_CONFIG",
        "FILENOTES_TIMEOUT",
        "FILENOTES_DEBUG",
        "DROPBOX_ACCESS_TOKEN",
        "DROPBOX_APP_KEY",
        "LOG_LEVEL",
        "LOG_FILE",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def notes_dir(tmp_path):
    path = tmp_path / "notes"
    path.mkdir()
    return path


@pytest.fixture
def state_dir(tmp_path):
    return tmp_path / "state"


@pytest.fixture
def settings(state_dir):
    return Settings(state_dir)


@pytest.fixture
def filesystem(notes_dir):
    return FileSystemService(notes_dir)


@pytest.fixture
def notes(filesystem, settings):
    return NotesManager(filesystem, settings)


@pytest.fixture
def cloud(filesystem):
    return InMemoryCloudService(filesystem)


@pytest.fixture
def replicator(cloud, filesystem, settings, notes):
    return Replicator(
        cloud=cloud, filesystem=filesystem, settings=settings, notes=notes
    )


@pytest.fixture
def write_local(notes_dir):
    """Factory fixture: create a note with a chosen modification time."""

    def _write(name: str, data: bytes, modified: datetime):
        path = notes_dir / name
        path.write_bytes(data)
        ts = modified.timestamp()
        os.utime(path, (ts, ts))
        return path

    return _write


@pytest.fixture
def mock_config(notes_dir, state_dir):
    return Config(
        notes_dir=str(notes_dir),
        state_dir=str(state_dir),
        access_token="test-token",
        app_key="test-app-key",
    )
