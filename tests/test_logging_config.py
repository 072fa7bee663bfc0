"""Tests for logging configuration."""

import json
import logging
import sys

import pytest

from promptpack.config import Settings
from promptpack.logging_config import PACKAGE_LOGGER, JSONFormatter, setup_logging


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Remove handlers and level set by setup_logging after each test."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


def file_settings(tmp_path, **overrides):
    values = dict(
        _env_file=None,
        log_dir=str(tmp_path),
        log_console_enabled=False,
        log_file_enabled=True,
    )
    values.update(overrides)
    return Settings(**values)


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_console_handlers(self):
        logger = setup_logging(settings=Settings(_env_file=None, log_level="DEBUG"))

        assert logger.name == "promptpack"
        assert logger.level == logging.DEBUG
        stream_handlers = [h for h in logger.handlers if isinstance(h, logging.StreamHandler)]
        assert len(stream_handlers) == 2

    def test_repeated_setup_replaces_handlers(self):
        settings = Settings(_env_file=None)

        setup_logging(settings=settings)
        logger = setup_logging(settings=settings)

        assert len(logger.handlers) == 2

    def test_file_logging(self, tmp_path):
        logger = setup_logging(context="cli", settings=file_settings(tmp_path))

        logging.getLogger("promptpack.store").info("Loaded 2 command(s)")
        for handler in logger.handlers:
            handler.flush()

        log_file = tmp_path / "cli.log"
        assert log_file.exists()
        text = log_file.read_text()
        assert "[INFO] promptpack.store: Loaded 2 command(s)" in text

    def test_level_filters_records(self, tmp_path):
        logger = setup_logging(context="quiet", settings=file_settings(tmp_path, log_level="WARNING"))

        logging.getLogger("promptpack.router").info("hidden")
        logging.getLogger("promptpack.router").warning("shown")
        for handler in logger.handlers:
            handler.flush()

        text = (tmp_path / "quiet.log").read_text()
        assert "hidden" not in text
        assert "shown" in text

    def test_json_format(self, tmp_path):
        logger = setup_logging(
            context="json", settings=file_settings(tmp_path, log_format="json")
        )

        logging.getLogger("promptpack.validator").warning("Manifest entry failed")
        for handler in logger.handlers:
            handler.flush()

        lines = (tmp_path / "json.log").read_text().splitlines()
        entry = json.loads(lines[-1])
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "promptpack.validator"
        assert entry["message"] == "Manifest entry failed"

    def test_creates_log_directory(self, tmp_path):
        log_dir = tmp_path / "nested" / "logs"

        setup_logging(settings=file_settings(tmp_path, log_dir=str(log_dir)))

        assert log_dir.is_dir()


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_includes_exception(self):
        formatter = JSONFormatter()
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                "promptpack", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        entry = json.loads(formatter.format(record))

        assert entry["message"] == "failed"
        assert "RuntimeError: boom" in entry["exception"]
