"""Tests for the output system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet mode suppression rules
- print_table in all three modes
- Diagnostic prefixes
- Global instance management
- Convenience functions
"""

from __future__ import annotations

import json

import pytest

from clibridge import output as output_module
from clibridge.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture(autouse=True)
def _reset_global_output():
    """Ensure the global output instance is reset between tests."""
    reset_output()
    yield
    reset_output()


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("clibridge.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("clibridge.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_tty_but_no_color(self, tty, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, non_tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON

    def test_explicit_rich_stays_rich(self, non_tty):
        assert OutputManager(format=OutputFormat.RICH).format == OutputFormat.RICH


# ------------------------------------------------------------------ #
# Color disabling
# ------------------------------------------------------------------ #


class TestColorDisabling:
    def test_no_color_env_disables_color(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    """Data goes to stdout and diagnostics go to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_data("hello world")
        captured = capfd.readouterr()
        assert captured.out == "hello world\n"
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("a message")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "a message" in captured.err

    def test_rich_diagnostics_go_to_stderr(self, capfd, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.RICH)
        mgr.success("saved")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "saved" in captured.err


# ------------------------------------------------------------------ #
# Quiet mode
# ------------------------------------------------------------------ #


class TestQuietMode:
    """Quiet suppresses info/success but not warning/error/data."""

    @pytest.mark.parametrize("method", ["info", "success"])
    def test_quiet_suppresses(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        getattr(mgr, method)("should not appear")
        assert capfd.readouterr().err == ""

    @pytest.mark.parametrize("method", ["warning", "error"])
    def test_quiet_keeps(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        getattr(mgr, method)("important")
        assert "important" in capfd.readouterr().err

    def test_quiet_does_not_suppress_stdout_data(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.print_data("important data")
        assert "important data" in capfd.readouterr().out


# ------------------------------------------------------------------ #
# Tables
# ------------------------------------------------------------------ #


class TestPrintTable:
    HEADERS = ["Name", "Command"]
    ROWS = [["alpha", "/bin/a"], ["beta", "/bin/b"]]

    def test_plain_is_tab_separated(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_table(self.HEADERS, self.ROWS)
        assert capfd.readouterr().out == "Name\tCommand\nalpha\t/bin/a\nbeta\t/bin/b\n"

    def test_json_records(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_table(self.HEADERS, self.ROWS)
        assert json.loads(capfd.readouterr().out) == [
            {"Name": "alpha", "Command": "/bin/a"},
            {"Name": "beta", "Command": "/bin/b"},
        ]

    def test_rich_table(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_table(self.HEADERS, self.ROWS, title="Servers")
        out = capfd.readouterr().out
        assert "Servers" in out
        assert "alpha" in out and "/bin/b" in out

    def test_print_json_indented(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_json({"a": 1})
        assert capfd.readouterr().out == '{\n  "a": 1\n}\n'


# ------------------------------------------------------------------ #
# Diagnostic formatting
# ------------------------------------------------------------------ #


class TestDiagnosticFormatting:
    def test_warning_prefix(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).warning("careful")
        assert capfd.readouterr().err == "Warning: careful\n"

    def test_error_prefix(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).error("broken")
        assert capfd.readouterr().err == "Error: broken\n"

    def test_info_has_no_prefix(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).info("note")
        assert capfd.readouterr().err == "note\n"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        assert isinstance(get_output(), OutputManager)

    def test_get_output_is_cached(self):
        assert get_output() is get_output()

    def test_set_output_overrides(self):
        custom = OutputManager(format=OutputFormat.JSON)
        set_output(custom)
        assert get_output() is custom

    def test_reset_output_clears(self):
        custom = OutputManager(format=OutputFormat.JSON)
        set_output(custom)
        reset_output()
        assert get_output() is not custom


class TestConvenienceFunctions:
    @pytest.fixture(autouse=True)
    def _plain(self, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))

    @pytest.mark.parametrize("name", ["info", "success", "warning", "error"])
    def test_diagnostics(self, capfd, name):
        getattr(output_module, name)("via module")
        assert "via module" in capfd.readouterr().err

    def test_print_data(self, capfd):
        output_module.print_data("payload")
        assert capfd.readouterr().out == "payload\n"

    def test_print_table(self, capfd):
        output_module.print_table(["A"], [["1"]])
        assert capfd.readouterr().out == "A\n1\n"
