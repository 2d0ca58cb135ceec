"""Rebuild a command line from a tool name and its payload.

Order of the resulting argument vector::

    [root opts] seg1 [seg1 opts] seg2 ... segN [local opts] [positional args]

Inherited options go right after the segment of the group that declares
them, because click only parses a group's options before the next
sub-command name. Flag values are written as follows:

* ``True`` -> the option alone; ``False`` -> nothing, or the ``--no-x``
  secondary option when the switch has one. Non-switch boolean options get
  an explicit ``true``/``false`` value.
* counters -> the option repeated N times; ``0`` -> nothing.
* lists -> the option repeated once per element.
* mappings -> one ``k=v,k2=v2`` value.
* JSON-schema flags -> one compact JSON value.
* numbers and strings -> their string form.
"""

from __future__ import annotations

import json
import logging
import shlex
from collections.abc import Mapping
from typing import Any, Optional, Sequence

from clibridge.compiler.tools import FlagBinding

logger = logging.getLogger(__name__)


def split_args(raw: str) -> list[str]:
    """Tokenize the positional text with POSIX shell quoting rules.

    Unbalanced quotes fall back to plain whitespace splitting.
    """
    if not raw or not raw.strip():
        return []
    try:
        return shlex.split(raw)
    except ValueError as exc:
        logger.warning("Falling back to whitespace split for %r: %s", raw, exc)
        return raw.split()


def command_segments(tool_name: str) -> list[str]:
    """Command path segments after the root, recovered from a tool name."""
    return tool_name.split("_")[1:]


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_flag_value(binding: FlagBinding, value: Any) -> list[str]:
    """Return the tokens for one flag value."""
    opt = binding.opt
    if value is None:
        return []
    if binding.json_encoded:
        return [opt, json.dumps(value, separators=(",", ":"), ensure_ascii=False)]
    if binding.count and isinstance(value, (int, float)) and not isinstance(value, bool):
        return [opt] * max(int(value), 0)
    if isinstance(value, bool):
        if binding.switch:
            if value:
                return [opt]
            return [binding.negation] if binding.negation else []
        return [opt, _scalar(value)]
    if isinstance(value, (list, tuple)):
        tokens: list[str] = []
        for item in value:
            tokens.extend(format_flag_value(binding, item))
        return tokens
    if isinstance(value, Mapping):
        if not value:
            return []
        return [opt, ",".join(f"{k}={_scalar(v)}" for k, v in value.items())]
    if isinstance(value, (int, float, str)):
        return [opt, _scalar(value)]
    logger.debug("Formatting unexpected value type %s for flag %r", type(value).__name__, binding.name)
    return [opt, str(value)]


def _fallback_binding(name: str) -> FlagBinding:
    opt = f"-{name}" if len(name) == 1 else f"--{name}"
    return FlagBinding(name=name, opt=opt, switch=True)


def build_command_args(
    tool_name: str,
    flags: Mapping[str, Any],
    args: str = "",
    bindings: Optional[Mapping[str, FlagBinding]] = None,
    segments: Optional[Sequence[str]] = None,
) -> list[str]:
    """Build the argument vector (without the program itself).

    Args:
        tool_name: The tool name; its ``_``-separated segments after the
            first become the sub-command path unless *segments* is given.
        flags: Flag values keyed by name. ``None`` values and empty names
            are skipped.
        args: Free-form positional text, shell-tokenized.
        bindings: Per-flag placement and encoding. Flags without a binding
            are emitted as local flags.
        segments: The sub-command path below the root, as recorded at
            compile time. Needed when a command name contains ``_``.
    """
    bindings = bindings or {}
    segments = list(segments) if segments is not None else command_segments(tool_name)
    by_depth: dict[int, list[str]] = {}
    local: list[str] = []

    for name, value in flags.items():
        if not name or value is None:
            continue
        binding = bindings.get(name) or _fallback_binding(name)
        tokens = format_flag_value(binding, value)
        if binding.depth is None or binding.depth >= len(segments):
            local.extend(tokens)
        else:
            by_depth.setdefault(binding.depth, []).extend(tokens)

    argv: list[str] = list(by_depth.get(0, []))
    for index, segment in enumerate(segments, start=1):
        argv.append(segment)
        if index < len(segments):
            argv.extend(by_depth.get(index, []))
    argv.extend(local)
    argv.extend(split_args(args))
    return argv
