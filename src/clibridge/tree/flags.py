"""Normalize click options into :class:`~clibridge.models.FlagDescriptor` values.

The synthesizer only understands type tags and raw-string defaults, so this
module is the single place that knows about click's parameter classes.

**Type inference** (first match wins):

* An explicit ``flag_type`` attribute on the option's ``ParamType`` (see
  :mod:`clibridge.params`).
* ``count=True`` options become ``count``. Switches become ``bool``,
  including valued switches (``flag_value="json"``): the agent turns them
  on or off and never supplies the value.
* ``nargs > 1`` options become the freeform ``tuple`` tag.
* Scalar click types map to ``bool``, ``int``, ``float64`` or ``string``.
  Unrecognized types keep their click type name as a freeform label.
* ``multiple=True`` lifts the scalar tag to its slice tag.
"""

from __future__ import annotations

import enum
import ipaddress
from collections.abc import Mapping
from datetime import timedelta
from pathlib import PurePath
from typing import Any, Optional

import click

from clibridge.models import FlagDescriptor, FlagType
from clibridge.params import format_duration

_SLICE_TAGS: dict[str, str] = {
    FlagType.STRING.value: FlagType.STRING_SLICE.value,
    FlagType.INT.value: FlagType.INT_SLICE.value,
    FlagType.INT32.value: FlagType.INT32_SLICE.value,
    FlagType.INT64.value: FlagType.INT64_SLICE.value,
    FlagType.UINT.value: FlagType.UINT_SLICE.value,
    FlagType.FLOAT32.value: FlagType.FLOAT32_SLICE.value,
    FlagType.FLOAT64.value: FlagType.FLOAT64_SLICE.value,
    FlagType.BOOL.value: FlagType.BOOL_SLICE.value,
}

_MAP_TAGS = frozenset(
    {
        FlagType.STRING_TO_STRING.value,
        FlagType.STRING_TO_INT.value,
        FlagType.STRING_TO_INT64.value,
    }
)

_PLAIN_DEFAULT_TYPES = (
    str,
    int,
    float,
    PurePath,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
)


def flag_name(option: click.Option) -> str:
    """Return the flag name: the first long option without dashes, else the short one."""
    for opt in option.opts:
        if opt.startswith("--"):
            return opt[2:]
    return option.opts[0].lstrip("-") if option.opts else (option.name or "")


def flag_opt(option: click.Option) -> str:
    """Return the option string used to pass this flag on a command line."""
    for opt in option.opts:
        if opt.startswith("--"):
            return opt
    return option.opts[0]


def infer_flag_type(option: click.Option) -> str:
    """Infer the flag type tag for *option*."""
    ptype = option.type
    explicit = getattr(ptype, "flag_type", None)
    if option.count:
        return FlagType.COUNT.value
    if option.is_flag:
        return FlagType.BOOL.value
    if option.nargs > 1:
        return "tuple"

    base = explicit or _scalar_tag(ptype)
    if option.multiple:
        if base in _MAP_TAGS:
            return base
        return _SLICE_TAGS.get(base, FlagType.STRING_SLICE.value)
    return base


def _scalar_tag(ptype: click.ParamType) -> str:
    if isinstance(ptype, click.types.BoolParamType):
        return FlagType.BOOL.value
    if isinstance(ptype, click.types.IntParamType):
        return FlagType.INT.value
    if isinstance(ptype, click.types.FloatParamType):
        return FlagType.FLOAT64.value
    if isinstance(ptype, (click.types.StringParamType, click.Choice, click.Path, click.File)):
        return FlagType.STRING.value
    return ptype.name


def render_default(value: Any) -> str:
    """Render a click default into the raw-string default convention.

    ``None``, callables and values of unknown types (including click's
    internal "unset" sentinels) render as ``""``, meaning "no default".
    """
    if value is None or callable(value):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, Mapping):
        return "[" + ",".join(f"{k}={_render_item(v)}" for k, v in value.items()) + "]"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_render_item(v) for v in value) + "]"
    if isinstance(value, enum.Enum):
        return str(value.value)
    if isinstance(value, _PLAIN_DEFAULT_TYPES):
        return str(value)
    return ""


def _render_item(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return str(value.value)
    return str(value)


def _choices(ptype: click.ParamType) -> Optional[list[str]]:
    if not isinstance(ptype, click.Choice):
        return None
    return [_render_item(choice) for choice in ptype.choices]


def describe_flag(option: click.Option, depth: Optional[int] = None) -> FlagDescriptor:
    """Build the :class:`FlagDescriptor` for a click option.

    Args:
        option: The click option to describe.
        depth: For inherited flags, the command-path index of the group that
            declares the option. ``None`` for local flags.
    """
    override = getattr(option.type, "json_schema", None)
    if _valued_switch(option):
        default, override, choices = _switch_default(option), None, None
    else:
        default, choices = render_default(option.default), _choices(option.type)
    return FlagDescriptor(
        name=flag_name(option),
        type=infer_flag_type(option),
        usage=option.help or "",
        default=default,
        hidden=bool(option.hidden),
        deprecated=bool(getattr(option, "deprecated", False)),
        required=bool(option.required),
        schema_override=dict(override) if isinstance(override, dict) else None,
        choices=choices,
        depth=depth,
    )


def flag_negation(option: click.Option) -> Optional[str]:
    """Return the ``--no-x`` style secondary option of a boolean switch, if any."""
    if option.is_flag and option.is_bool_flag and option.secondary_opts:
        return option.secondary_opts[0]
    return None


def _valued_switch(option: click.Option) -> bool:
    return bool(option.is_flag and not option.is_bool_flag)


def _switch_default(option: click.Option) -> str:
    """A valued switch defaults to on only when its default is its flag value."""
    if option.default is not None and option.default == option.flag_value:
        return "true"
    return ""
