"""Tests for clibridge.log."""

from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from clibridge.log import configure_logging, parse_log_level


@pytest.fixture
def restore_root_logger():
    """Put the root logger's handlers and level back after the test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestParseLogLevel:
    @pytest.mark.parametrize(
        "value, level",
        [
            ("debug", logging.DEBUG),
            ("info", logging.INFO),
            ("warn", logging.WARNING),
            ("warning", logging.WARNING),
            ("error", logging.ERROR),
            ("  DEBUG ", logging.DEBUG),
        ],
    )
    def test_known(self, value: str, level: int) -> None:
        assert parse_log_level(value) == level

    @pytest.mark.parametrize("value", [None, "", "verbose", "trace"])
    def test_unknown_defaults_to_info(self, value) -> None:
        assert parse_log_level(value) == logging.INFO


class TestConfigureLogging:
    def test_installs_rich_handler_on_stderr(self, restore_root_logger) -> None:
        assert configure_logging("debug") == logging.DEBUG
        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler, RichHandler)
        assert handler.console.stderr

    def test_replaces_previous_configuration(self, restore_root_logger) -> None:
        configure_logging("debug")
        configure_logging("error")
        assert len(restore_root_logger.handlers) == 1
        assert restore_root_logger.level == logging.ERROR

    def test_records_reach_stderr_only(self, restore_root_logger, capsys) -> None:
        configure_logging("info", no_color=True)
        logging.getLogger("clibridge.test").info("hello from the log")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "hello from the log" in captured.err
