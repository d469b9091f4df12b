"""Tests for settings and logging setup."""

import json
import logging
import sys
from pathlib import Path

import pytest

from config import Settings
from logging_setup import JsonFormatter, setup_logging


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        for name in (
            "RENTMATCH_DB_PATH",
            "RENTMATCH_SECRET_KEY",
            "RENTMATCH_SESSION_MAX_AGE",
            "RENTMATCH_LOG_LEVEL",
            "RENTMATCH_LOG_FORMAT",
            "RENTMATCH_SEED_SAMPLE_DATA",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()
        assert settings == Settings()
        assert settings.seed_sample_data is False

    def test_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("RENTMATCH_DB_PATH", "/tmp/rm.db")
        monkeypatch.setenv("RENTMATCH_SECRET_KEY", "s3cret")
        monkeypatch.setenv("RENTMATCH_SESSION_MAX_AGE", "60")
        monkeypatch.setenv("RENTMATCH_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("RENTMATCH_LOG_FORMAT", "json")
        monkeypatch.setenv("RENTMATCH_SEED_SAMPLE_DATA", "TRUE")

        settings = Settings.from_env()
        assert settings.db_path == Path("/tmp/rm.db")
        assert settings.secret_key == "s3cret"
        assert settings.session_max_age == 60
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "json"
        assert settings.seed_sample_data is True


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


class TestLogging:
    def test_json_setup(self, restore_root_logger) -> None:
        setup_logging("debug", "json")

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)

    def test_unknown_level_falls_back_to_info(self, restore_root_logger) -> None:
        setup_logging("chatty")
        assert restore_root_logger.level == logging.INFO

    def test_json_formatter(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                "scoring", logging.ERROR, __file__, 1, "scored %s", ("x",), sys.exc_info()
            )

        data = json.loads(JsonFormatter().format(record))
        assert data["level"] == "ERROR"
        assert data["logger"] == "scoring"
        assert data["message"] == "scored x"
        assert "RuntimeError: boom" in data["exception"]
