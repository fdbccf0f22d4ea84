"""Tests for logger.py: setup_logging(), apply_configured_level() and JsonFormatter.

Strategy: mock logging.basicConfig to check the arguments setup_logging
passes, since pytest's log capture plugin interferes with real calls.
"""

import json
import logging
import sys
from unittest.mock import patch

import pytest

from filenotes_sync.logger import (
    DEFAULT_LOG_FILE,
    JsonFormatter,
    apply_configured_level,
    setup_logging,
)


class TestSetupLogging:
    @patch("filenotes_sync.logger.logging.basicConfig")
    def test_cli_mode_logs_to_stderr(self, mock_basic):
        setup_logging(mode="cli")

        handlers = mock_basic.call_args.kwargs["handlers"]
        assert isinstance(handlers[0], logging.StreamHandler)
        assert handlers[0].stream is sys.stderr

    @patch("filenotes_sync.logger.logging.basicConfig")
    def test_cli_mode_with_log_file_adds_file_handler(
        self, mock_basic, tmp_path
    ):
        setup_logging(mode="cli", log_file=str(tmp_path / "cli.log"))

        handlers = mock_basic.call_args.kwargs["handlers"]
        file_handlers = [
            h for h in handlers if isinstance(h, logging.FileHandler)
        ]
        assert len(handlers) == 2
        assert len(file_handlers) == 1
        for h in file_handlers:
            h.close()

    @patch("filenotes_sync.logger.logging.basicConfig")
    def test_mcp_mode_never_uses_stdout(self, mock_basic, tmp_path):
        log_file = str(tmp_path / "mcp.log")
        setup_logging(mode="mcp", log_file=log_file)

        kwargs = mock_basic.call_args.kwargs
        assert kwargs["filename"] == log_file
        assert "handlers" not in kwargs

    @patch("filenotes_sync.logger.logging.basicConfig")
    def test_mcp_mode_default_log_file(self, mock_basic):
        setup_logging(mode="mcp")
        assert mock_basic.call_args.kwargs["filename"] == DEFAULT_LOG_FILE

    @patch("filenotes_sync.logger.logging.basicConfig")
    def test_default_levels(self, mock_basic):
        setup_logging(mode="mcp")
        assert mock_basic.call_args.kwargs["level"] == logging.WARNING
        setup_logging(mode="cli")
        assert mock_basic.call_args.kwargs["level"] == logging.INFO

    @patch("filenotes_sync.logger.logging.basicConfig")
    def test_debug_beats_env(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging(mode="cli")
        assert mock_basic.call_args.kwargs["level"] == logging.ERROR

        setup_logging(mode="cli", debug=True)
        assert mock_basic.call_args.kwargs["level"] == logging.DEBUG

    @patch("filenotes_sync.logger.logging.basicConfig")
    def test_json_format(self, mock_basic):
        setup_logging(mode="cli", debug_format="json")

        handlers = mock_basic.call_args.kwargs["handlers"]
        assert isinstance(handlers[0].formatter, JsonFormatter)

    @patch("filenotes_sync.logger.logging.basicConfig")
    def test_http_clients_silenced(self, _mock_basic):
        setup_logging(mode="cli")

        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("requests").level == logging.WARNING


class TestApplyConfiguredLevel:
    @pytest.fixture(autouse=True)
    def _restore_root_level(self):
        root = logging.getLogger()
        original = root.level
        root.setLevel(logging.INFO)
        yield root
        root.setLevel(original)

    def test_sets_root_level(self, _restore_root_level):
        apply_configured_level("error")
        assert _restore_root_level.level == logging.ERROR

    def test_env_var_wins(self, _restore_root_level, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "INFO")
        apply_configured_level("ERROR")
        assert _restore_root_level.level == logging.INFO

    def test_debug_wins(self, _restore_root_level):
        _restore_root_level.setLevel(logging.DEBUG)
        apply_configured_level("ERROR")
        assert _restore_root_level.level == logging.DEBUG

    def test_unknown_or_missing_level_ignored(self, _restore_root_level):
        apply_configured_level(None)
        apply_configured_level("LOUD")
        assert _restore_root_level.level == logging.INFO

    def test_debug_flag_beats_everything(
        self, _restore_root_level, monkeypatch
    ):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        urllib3_logger = logging.getLogger("urllib3")
        original = urllib3_logger.level
        urllib3_logger.setLevel(logging.WARNING)
        try:
            apply_configured_level("ERROR", debug=True)

            assert _restore_root_level.level == logging.DEBUG
            assert urllib3_logger.level == logging.NOTSET
        finally:
            urllib3_logger.setLevel(original)


class TestJsonFormatter:
    def _record(self, **kwargs):
        defaults = dict(
            name="filenotes_sync.sync.replicator",
            level=logging.INFO,
            pathname="replicator.py",
            lineno=1,
            msg="Uploading %s",
            args=("a.txt",),
            exc_info=None,
        )
        defaults.update(kwargs)
        return logging.LogRecord(**defaults)

    def test_basic_output(self):
        output = JsonFormatter(datefmt="%Y-%m-%d %H:%M:%S").format(
            self._record()
        )
        data = json.loads(output)

        assert "\n" not in output
        assert data["level"] == "INFO"
        assert data["logger"] == "filenotes_sync.sync.replicator"
        assert data["msg"] == "Uploading a.txt"

    def test_includes_exception(self):
        try:
            raise RuntimeError("listing exploded")
        except RuntimeError:
            exc_info = sys.exc_info()

        data = json.loads(
            JsonFormatter().format(
                self._record(level=logging.ERROR, exc_info=exc_info)
            )
        )

        assert "RuntimeError" in data["exc"]
        assert "listing exploded" in data["exc"]
