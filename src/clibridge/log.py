"""Logging setup for the ``mcp`` sub-commands.

Library modules log through ``logging.getLogger(__name__)`` and never
configure handlers themselves. The CLI entry points call
:func:`configure_logging`, which installs a :class:`rich.logging.RichHandler`
on **stderr**: stdout belongs to the stdio transport and must carry protocol
messages only.
"""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_log_level(value: Optional[str]) -> int:
    """Map ``debug``/``info``/``warn``/``error`` to a logging level; anything else is INFO."""
    if not value:
        return logging.INFO
    return _LEVELS.get(value.strip().lower(), logging.INFO)


def configure_logging(level: Optional[str] = None, no_color: bool = False) -> int:
    """Send all log records at *level* or above to stderr via Rich.

    Returns:
        The numeric level that was installed.
    """
    numeric = parse_log_level(level)
    handler = RichHandler(
        console=Console(stderr=True, no_color=no_color),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=numeric,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    return numeric
