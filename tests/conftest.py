"""Shared test fixtures for clibridge.

Provides the sample click application, a node-built command tree,
self-execution pointed at the sample application, isolated editor config
locations, output-state cleanup and a CLI runner. Fixtures are discovered
by pytest automatically.
"""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path
from types import ModuleType

import click
import pytest

from clibridge.output import OutputFormat, OutputManager, reset_output, set_output
from clibridge.tree.nodes import CommandNode


FIXTURES_DIR = Path(__file__).parent / "fixtures"
SAMPLE_CLI = FIXTURES_DIR / "sample_cli.py"


def load_sample_module() -> ModuleType:
    """Import ``tests/fixtures/sample_cli.py`` as a module."""
    spec = importlib.util.spec_from_file_location("sample_cli", SAMPLE_CLI)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Sample application
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_module() -> ModuleType:
    return load_sample_module()


@pytest.fixture
def sample_cli(sample_module: ModuleType) -> click.Group:
    """Root click group of the sample application."""
    return sample_module.cli


@pytest.fixture
def sample_root(sample_cli: click.Group) -> CommandNode:
    return CommandNode.from_root(sample_cli)


@pytest.fixture
def node_at(sample_root: CommandNode):
    """Return a function that descends from the sample root through named sub-commands."""

    def find(*segments: str) -> CommandNode:
        node = sample_root
        for segment in segments:
            node = next(child for child in node.children() if child.name == segment)
        return node

    return find


@pytest.fixture
def run_sample(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Make self re-execution run the sample application.

    Returns:
        The argv prefix that is used instead of the real program.
    """
    prefix = [sys.executable, str(SAMPLE_CLI)]
    monkeypatch.setattr("clibridge.bridge.execute.resolve_self_command", lambda: list(prefix))
    return prefix


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate editor config locations to a temporary directory.

    Points HOME, XDG_CONFIG_HOME and APPDATA below tmp_path and changes
    the working directory to tmp_path, so workspace configs land there too.

    Returns:
        The tmp_path root directory.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
