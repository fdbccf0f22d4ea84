"""Tests for filenotes_sync.config: env-var config loading and validation.

NOT to be confused with test_config_loader.py (hierarchical YAML config)
or test_config_schema.py (Pydantic models).
"""

from pathlib import Path

import pytest

from filenotes_sync.config import (
    DEFAULT_STATE_DIR,
    Config,
    load_config,
    validate_config,
)

# -------------------------------------------------------------------------
# validate_config()
# -------------------------------------------------------------------------


class TestValidateConfig:
    def test_valid_config(self, tmp_path):
        validate_config(Config(notes_dir=str(tmp_path)))

    def test_missing_directory_is_allowed(self, tmp_path):
        validate_config(Config(notes_dir=str(tmp_path / "later")))

    def test_blank_notes_dir(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            validate_config(Config(notes_dir="   "))

    def test_notes_dir_is_a_file(self, tmp_path):
        f = tmp_path / "file.txt"
        f.write_text("x")
        with pytest.raises(ValueError, match="not a directory"):
            validate_config(Config(notes_dir=str(f)))

    @pytest.mark.parametrize("timeout", [0, 601])
    def test_timeout_out_of_range(self, tmp_path, timeout):
        with pytest.raises(ValueError, match="between 1 and 600"):
            validate_config(Config(notes_dir=str(tmp_path), timeout=timeout))


class TestConfigPaths:
    def test_paths_expand_user(self):
        config = Config(notes_dir="~/Notes")
        assert config.notes_path == Path.home() / "Notes"
        assert config.state_path == Path(DEFAULT_STATE_DIR).expanduser()


# -------------------------------------------------------------------------
# load_config()
# -------------------------------------------------------------------------


class TestLoadConfig:
    def test_missing_notes_dir_raises(self):
        with pytest.raises(ValueError, match="FILENOTES_NOTES_DIR"):
            load_config()

    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FILENOTES_NOTES_DIR", str(tmp_path))
        monkeypatch.setenv("FILENOTES_STATE_DIR", str(tmp_path / "state"))
        monkeypatch.setenv("DROPBOX_ACCESS_TOKEN", "env-token")
        monkeypatch.setenv("DROPBOX_APP_KEY", "env-key")
        monkeypatch.setenv("FILENOTES_TIMEOUT", "30")
        monkeypatch.setenv("FILENOTES_DEBUG", "yes")

        config = load_config()

        assert config.notes_dir == str(tmp_path)
        assert config.state_dir == str(tmp_path / "state")
        assert config.access_token == "env-token"
        assert config.app_key == "env-key"
        assert config.timeout == 30
        assert config.debug is True

    def test_cli_beats_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FILENOTES_NOTES_DIR", "/from/env")
        config = load_config(notes_dir=str(tmp_path))
        assert config.notes_dir == str(tmp_path)

    def test_env_beats_yaml(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FILENOTES_NOTES_DIR", str(tmp_path))
        config = load_config(
            yaml_fallbacks={"notes_dir": "/from/yaml", "timeout": 90}
        )
        assert config.notes_dir == str(tmp_path)
        assert config.timeout == 90

    def test_yaml_fallbacks_used(self, tmp_path):
        config = load_config(
            yaml_fallbacks={
                "notes_dir": str(tmp_path),
                "state_dir": str(tmp_path / "s"),
                "access_token": "yaml-token",
                "app_key": "yaml-key",
            }
        )
        assert config.state_dir == str(tmp_path / "s")
        assert config.access_token == "yaml-token"
        assert config.app_key == "yaml-key"

    def test_log_level_from_yaml(self, tmp_path):
        config = load_config(
            yaml_fallbacks={"notes_dir": str(tmp_path), "log_level": "ERROR"}
        )
        assert config.log_level == "ERROR"

    def test_defaults(self, tmp_path):
        config = load_config(notes_dir=str(tmp_path))
        assert config.state_dir == DEFAULT_STATE_DIR
        assert config.timeout == 60
        assert config.access_token is None
        assert config.debug is False

    def test_invalid_timeout(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FILENOTES_TIMEOUT", "soon")
        with pytest.raises(ValueError, match="Invalid FILENOTES_TIMEOUT"):
            load_config(notes_dir=str(tmp_path))
