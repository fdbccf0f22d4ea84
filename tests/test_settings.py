"""Tests for the persisted replication settings.

Covers:
- Load returns defaults when the file doesn't exist
- Save creates the state directory and writes atomically
- last_sync round trip, NEVER sentinel stored as null
- replication_required dirty bit
- Dropbox access token storage
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

from filenotes_sync.sync.settings import NEVER, SETTINGS_FILE, Settings


class TestSettingsLoad:
    def test_load_returns_defaults_when_file_missing(self, tmp_path: Path):
        settings = Settings(tmp_path / "nonexistent")
        assert settings.load() == {
            "version": 1,
            "last_sync": None,
            "replication_required": False,
            "dropbox_access_token": None,
        }

    def test_load_fills_missing_keys(self, tmp_path: Path):
        (tmp_path / SETTINGS_FILE).write_text(
            json.dumps({"replication_required": True})
        )
        data = Settings(tmp_path).load()
        assert data["replication_required"] is True
        assert data["last_sync"] is None


class TestSettingsSave:
    def test_save_creates_state_dir(self, tmp_path: Path):
        state_dir = tmp_path / "nested" / "deep"
        settings = Settings(state_dir)

        settings.set_replication_required(True)

        assert (state_dir / SETTINGS_FILE).is_file()

    def test_save_leaves_no_temp_files(self, tmp_path: Path):
        settings = Settings(tmp_path)
        settings.set_replication_required(True)
        settings.set_replication_required(False)

        assert [p.name for p in tmp_path.iterdir()] == [SETTINGS_FILE]

    def test_setters_preserve_other_keys(self, tmp_path: Path):
        settings = Settings(tmp_path)
        settings.set_dropbox_access_token("tok")
        settings.set_replication_required(True)

        assert settings.get_dropbox_access_token() == "tok"


class TestLastSync:
    def test_defaults_to_never(self, settings):
        assert settings.get_last_sync() == NEVER

    def test_round_trip(self, settings):
        when = datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc)
        settings.set_last_sync(when)
        assert settings.get_last_sync() == when

    def test_other_timezones_are_normalised_to_utc(self, settings):
        plus_two = timezone(timedelta(hours=2))
        settings.set_last_sync(datetime(2024, 5, 6, 9, 0, tzinfo=plus_two))

        result = settings.get_last_sync()

        assert result == datetime(2024, 5, 6, 7, 0, tzinfo=timezone.utc)
        assert result.utcoffset() == timedelta(0)

    def test_never_is_stored_as_null(self, settings):
        settings.set_last_sync(datetime(2024, 1, 1, tzinfo=timezone.utc))
        settings.reset_last_sync()

        assert settings.load()["last_sync"] is None
        assert settings.get_last_sync() == NEVER

    def test_visible_to_second_instance(self, state_dir):
        when = datetime(2024, 1, 1, tzinfo=timezone.utc)
        Settings(state_dir).set_last_sync(when)
        assert Settings(state_dir).get_last_sync() == when


class TestReplicationRequired:
    def test_default_false(self, settings):
        assert settings.is_replication_required() is False

    def test_set_and_clear(self, settings):
        settings.set_replication_required(True)
        assert settings.is_replication_required() is True
        settings.set_replication_required(False)
        assert settings.is_replication_required() is False


class TestDropboxToken:
    def test_default_none(self, settings):
        assert settings.get_dropbox_access_token() is None

    def test_set_and_clear(self, settings):
        settings.set_dropbox_access_token("abc")
        assert settings.get_dropbox_access_token() == "abc"
        settings.clear_dropbox_access_token()
        assert settings.get_dropbox_access_token() is None
