"""User-facing output for the ``mcp`` sub-commands.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (server listings, exported tools).
* **stderr** -- status, warnings and errors.
* **Colour control** -- Rich formatting on an interactive terminal, plain
  text when piped or when ``NO_COLOR`` / ``TERM=dumb`` is set.

Never use this module while the stdio server is running; its stdout is
the protocol channel. Log through :mod:`logging` there instead.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.table import Table


class OutputFormat(str, Enum):
    """Supported output formats. ``AUTO`` picks ``RICH`` on a colour TTY, else ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes data to stdout and diagnostics to stderr.

    Args:
        format: Desired output format.
        no_color: Disable colour and Rich markup.
        quiet: Suppress informational and success messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_json(self, data: Any) -> None:
        self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a Rich table, JSON records, or tab-separated lines."""
        if self._format == OutputFormat.JSON:
            self.print_json([dict(zip(headers, row)) for row in rows])
        elif self._format == OutputFormat.PLAIN:
            self.print_data("\t".join(headers))
            for row in rows:
                self.print_data("\t".join(row))
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        if self._quiet:
            return
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(message)

    def success(self, message: str) -> None:
        if self._quiet:
            return
        if self._no_color:
            print(message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Print a warning to stderr. Not suppressed by quiet mode."""
        if self._no_color:
            print(f"Warning: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Print an error to stderr. Never suppressed."""
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {message}")


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the global manager; tests use this to drop stale stream references."""
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)
