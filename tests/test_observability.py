"""
Tests for observability — logging setup.
"""

import logging
from pathlib import Path

from bundlesync.core.observability.logging_config import _parse_level, resolve_level, setup_logging


class TestParseLevel:
    def test_names(self):
        assert _parse_level("debug") == logging.DEBUG
        assert _parse_level("WARNING") == logging.WARNING

    def test_unknown_falls_back_to_info(self):
        assert _parse_level("chatty") == logging.INFO
        assert _parse_level(None) == logging.INFO


class TestResolveLevel:
    def test_flags_win_over_env(self):
        env = {"BUNDLESYNC_LOG_LEVEL": "WARNING"}
        assert resolve_level(debug=True, env=env) == "DEBUG"
        assert resolve_level(quiet=True, env=env) == "ERROR"

    def test_env(self):
        assert resolve_level(env={"BUNDLESYNC_LOG_LEVEL": "WARNING"}) == "WARNING"

    def test_default_is_info(self):
        assert resolve_level(env={}) == "INFO"
        assert resolve_level(env={"BUNDLESYNC_LOG_LEVEL": ""}) == "INFO"


class TestSetupLogging:
    def test_console_level(self):
        setup_logging(level="ERROR")
        root = logging.getLogger()
        assert root.level == logging.ERROR
        assert len(root.handlers) == 1
        assert root.handlers[0].level == logging.ERROR

    def test_noisy_loggers_quieted(self):
        setup_logging(level="INFO")
        assert logging.getLogger("botocore").level == logging.WARNING

    def test_debug_keeps_third_party(self):
        logging.getLogger("botocore").setLevel(logging.NOTSET)
        setup_logging(level="DEBUG")
        assert logging.getLogger("botocore").level == logging.NOTSET

    def test_file_handler(self, tmp_path: Path):
        log_file = tmp_path / "logs" / "agent.log"
        setup_logging(level="ERROR", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        try:
            assert root.level == logging.DEBUG
            logging.getLogger("bundlesync.test").info("Installing apps/tool.zip")
            for handler in root.handlers:
                handler.flush()
            assert "Installing apps/tool.zip" in log_file.read_text()
        finally:
            for handler in root.handlers:
                if isinstance(handler, logging.FileHandler):
                    handler.close()
