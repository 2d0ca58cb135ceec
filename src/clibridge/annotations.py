"""Tool annotations attached to commands.

MCP tools can carry behavioural hints (read-only, destructive, idempotent,
open-world) and a display title. They are declared next to the command and
read back when the tool is compiled::

    @cli.command()
    @annotate(read_only=True, title="List pods")
    def pods():
        ...

``annotate`` also accepts a click command directly (``annotate(cmd,
destructive=True)``). Values are stored as strings under the MCP hint names,
so they can also be written by hand; invalid booleans are logged and skipped.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

import click
from mcp.types import ToolAnnotations

from clibridge.params import parse_bool

logger = logging.getLogger(__name__)

ANNOTATIONS_ATTR = "__mcp_annotations__"

TITLE = "title"
READ_ONLY_HINT = "readOnlyHint"
DESTRUCTIVE_HINT = "destructiveHint"
IDEMPOTENT_HINT = "idempotentHint"
OPEN_WORLD_HINT = "openWorldHint"
EXAMPLES = "examples"

_BOOL_HINTS = (READ_ONLY_HINT, DESTRUCTIVE_HINT, IDEMPOTENT_HINT, OPEN_WORLD_HINT)

T = TypeVar("T")


def annotate(
    target: Any = None,
    *,
    title: Optional[str] = None,
    read_only: Optional[bool] = None,
    destructive: Optional[bool] = None,
    idempotent: Optional[bool] = None,
    open_world: Optional[bool] = None,
    examples: Optional[str] = None,
) -> Any:
    """Attach MCP annotations to a click command or a command callback.

    Without *target* this returns a decorator. Annotations set on a callback
    are visible through the click command that wraps it, including commands
    built by typer.
    """
    values: dict[str, str] = {}
    if title is not None:
        values[TITLE] = title
    for key, flag in (
        (READ_ONLY_HINT, read_only),
        (DESTRUCTIVE_HINT, destructive),
        (IDEMPOTENT_HINT, idempotent),
        (OPEN_WORLD_HINT, open_world),
    ):
        if flag is not None:
            values[key] = "true" if flag else "false"
    if examples is not None:
        values[EXAMPLES] = examples

    def apply(obj: T) -> T:
        existing = getattr(obj, ANNOTATIONS_ATTR, None) or {}
        setattr(obj, ANNOTATIONS_ATTR, {**existing, **values})
        return obj

    if target is None:
        return apply
    return apply(target)


def command_annotations(command: click.Command) -> dict[str, str]:
    """Collect the raw annotation strings of *command* and its callback."""
    merged: dict[str, str] = {}
    callback: Optional[Callable[..., Any]] = command.callback
    while callback is not None:
        merged = {**(getattr(callback, ANNOTATIONS_ATTR, None) or {}), **merged}
        callback = getattr(callback, "__wrapped__", None)
    merged.update(getattr(command, ANNOTATIONS_ATTR, None) or {})
    return merged


def tool_annotations(annotations: dict[str, str]) -> Optional[ToolAnnotations]:
    """Translate raw annotation strings into :class:`mcp.types.ToolAnnotations`.

    Returns ``None`` when no recognised annotation is set.
    """
    fields: dict[str, Any] = {}
    title = annotations.get(TITLE)
    if title:
        fields[TITLE] = title
    for key in _BOOL_HINTS:
        raw = annotations.get(key)
        if raw is None:
            continue
        try:
            fields[key] = parse_bool(raw)
        except ValueError:
            logger.warning("Ignoring annotation %s: invalid boolean %r", key, raw)
    if not fields:
        return None
    return ToolAnnotations(**fields)
