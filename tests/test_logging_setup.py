# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Tests for logging setup."""

import json
import logging
import tempfile
from pathlib import Path

import pytest

from reload_guard.logging_setup import DEFAULT_LOG_DIRNAME, StructuredFormatter, setup_logging


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Leave the reload_guard logger as we found it."""
    package_logger = logging.getLogger("reload_guard")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    for handler in package_logger.handlers:
        handler.close()
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)


def _read_entries(log_file: Path):
    return [json.loads(line) for line in log_file.read_text().splitlines() if line]


def test_setup_logging_creates_directory():
    """Test that setup_logging creates the log directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        log_dir = Path(tmpdir) / DEFAULT_LOG_DIRNAME
        assert not log_dir.exists()

        setup_logging(log_dir=log_dir, console_output=False)

        assert log_dir.is_dir()


def test_default_log_dir_under_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    log_file = setup_logging(console_output=False)

    assert log_file.parent == tmp_path / DEFAULT_LOG_DIRNAME
    assert log_file.name.startswith("reload_guard_")


def test_setup_logging_creates_log_file():
    """Test that setup_logging creates exactly one log file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        log_dir = Path(tmpdir) / DEFAULT_LOG_DIRNAME

        log_file = setup_logging(log_dir=log_dir, console_output=False)

        assert list(log_dir.glob("*.log")) == [log_file]


def test_logging_produces_json():
    """Test that package logs are written in JSON format."""
    with tempfile.TemporaryDirectory() as tmpdir:
        log_file = setup_logging(log_dir=Path(tmpdir), console_output=False)

        logging.getLogger("reload_guard.checker").info("Test message")

        entries = _read_entries(log_file)
        # Startup message + test message
        assert len(entries) >= 2
        for entry in entries:
            assert {"timestamp", "level", "logger", "message"} <= set(entry)
        assert entries[-1]["message"] == "Test message"
        assert entries[-1]["logger"] == "reload_guard.checker"
        assert entries[-1]["timestamp"].endswith("Z")


def test_logging_levels():
    """Messages below the configured level are dropped."""
    with tempfile.TemporaryDirectory() as tmpdir:
        log_file = setup_logging(
            log_dir=Path(tmpdir), log_level=logging.WARNING, console_output=False
        )

        logger = logging.getLogger("reload_guard.test")
        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")

        messages = [entry["message"] for entry in _read_entries(log_file)]
        assert "Debug message" not in messages
        assert "Info message" not in messages
        assert "Warning message" in messages


def test_structured_formatter_with_exception():
    """Test that exceptions are included in structured logs."""
    formatter = StructuredFormatter()

    try:
        raise ValueError("Test exception")
    except ValueError:
        import sys

        record = logging.LogRecord(
            name="reload_guard",
            level=logging.ERROR,
            pathname="test.py",
            lineno=1,
            msg="Error occurred",
            args=(),
            exc_info=sys.exc_info(),
        )

    log_entry = json.loads(formatter.format(record))

    assert log_entry["level"] == "ERROR"
    assert log_entry["message"] == "Error occurred"
    assert "ValueError: Test exception" in log_entry["exception"]


def test_structured_formatter_extra_fields():
    record = logging.LogRecord(
        name="reload_guard",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg="checked",
        args=(),
        exc_info=None,
    )
    record.extra_fields = {"parent": "src/app.js", "specifier": "./plugin.js"}

    log_entry = json.loads(StructuredFormatter().format(record))

    assert log_entry["parent"] == "src/app.js"
    assert log_entry["specifier"] == "./plugin.js"


def test_setup_logging_clears_existing_handlers():
    """Calling setup_logging twice does not double the handlers."""
    with tempfile.TemporaryDirectory() as tmpdir:
        setup_logging(log_dir=Path(tmpdir), console_output=False)
        initial_handler_count = len(logging.getLogger("reload_guard").handlers)

        setup_logging(log_dir=Path(tmpdir), console_output=False)

        assert len(logging.getLogger("reload_guard").handlers) == initial_handler_count


def test_console_output_option():
    """Test that console output can be enabled/disabled."""
    with tempfile.TemporaryDirectory() as tmpdir:
        setup_logging(log_dir=Path(tmpdir), console_output=True)
        assert len(logging.getLogger("reload_guard").handlers) == 2  # File + Console

        setup_logging(log_dir=Path(tmpdir), console_output=False)
        assert len(logging.getLogger("reload_guard").handlers) == 1  # File only


def test_root_logger_untouched():
    root_handlers = list(logging.getLogger().handlers)
    with tempfile.TemporaryDirectory() as tmpdir:
        setup_logging(log_dir=Path(tmpdir), console_output=True)

    assert logging.getLogger().handlers == root_handlers
