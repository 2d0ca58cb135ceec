"""Click parameter types for flag shapes click has no native type for.

Each type sets a ``flag_type`` attribute naming its
:class:`~clibridge.models.FlagType` tag. The flag adapter in
:mod:`clibridge.tree.flags` reads that attribute in preference to its own
inference, so a command declared with these types gets the matching schema
fragment (pattern, format note, or map shape).

Example::

    @click.command()
    @click.option("--label", type=KeyValue(), multiple=False)
    @click.option("--timeout", type=Duration(), default="30s")
    def deploy(label, timeout): ...
"""

from __future__ import annotations

import base64
import binascii
import ipaddress
import json
import re
from datetime import timedelta
from typing import Any, Optional

import click

from clibridge.models import FlagType

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_DURATION_FULL = re.compile(r"^-?(?:\d+(?:\.\d+)?(?:ns|us|µs|ms|s|m|h))+$")

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


_TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_bool(text: str) -> bool:
    """Parse a boolean using the spellings flag libraries accept (``t``, ``TRUE``, ``0`` ...).

    Raises:
        ValueError: If *text* is not a recognised boolean spelling.
    """
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValueError(f"invalid boolean {text!r}")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``1h30m`` or ``250ms`` into a timedelta.

    Raises:
        ValueError: If *text* is not a valid duration.
    """
    text = text.strip()
    if text in ("0", "-0"):
        return timedelta(0)
    if not _DURATION_FULL.match(text):
        raise ValueError(f"invalid duration {text!r}")
    sign = -1 if text.startswith("-") else 1
    seconds = sum(
        float(amount) * _UNIT_SECONDS[unit]
        for amount, unit in _DURATION_PART.findall(text)
    )
    return timedelta(seconds=sign * seconds)


def format_duration(value: timedelta) -> str:
    """Render a timedelta the way duration flags print their defaults (``1h30m0s``)."""
    total = value.total_seconds()
    if total == 0:
        return "0s"
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    seconds_text = f"{seconds:g}s"
    if hours:
        return f"{sign}{int(hours)}h{int(minutes)}m{seconds_text}"
    if minutes:
        return f"{sign}{int(minutes)}m{seconds_text}"
    if seconds < 1:
        return f"{sign}{seconds * 1000:g}ms"
    return f"{sign}{seconds_text}"


class KeyValue(click.ParamType):
    """``k=v,k2=v2`` map option.

    Args:
        value_type: ``str`` for string values or ``int`` for integer values.
    """

    name = "key=value"

    def __init__(self, value_type: type = str) -> None:
        if value_type not in (str, int):
            raise TypeError("KeyValue supports str or int values")
        self.value_type = value_type
        self.flag_type = (
            FlagType.STRING_TO_INT.value
            if value_type is int
            else FlagType.STRING_TO_STRING.value
        )

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> dict:
        if isinstance(value, dict):
            return value
        result: dict[str, Any] = {}
        text = str(value).strip()
        if text.startswith("[") and text.endswith("]"):
            text = text[1:-1]
        for entry in text.split(","):
            entry = entry.strip()
            if not entry:
                continue
            key, sep, raw = entry.partition("=")
            if not sep or not key.strip():
                self.fail(f"{entry!r} is not a key=value pair", param, ctx)
            raw = raw.strip()
            if self.value_type is int:
                try:
                    result[key.strip()] = int(raw)
                except ValueError:
                    self.fail(f"{raw!r} is not an integer", param, ctx)
            else:
                result[key.strip()] = raw
        return result


class Duration(click.ParamType):
    """Duration option such as ``10s`` or ``2h45m``, converted to a timedelta."""

    name = "duration"
    flag_type = FlagType.DURATION.value

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> timedelta:
        if isinstance(value, timedelta):
            return value
        try:
            return parse_duration(str(value))
        except ValueError as exc:
            self.fail(str(exc), param, ctx)


class IPAddress(click.ParamType):
    """IPv4 or IPv6 address option."""

    name = "ip"
    flag_type = FlagType.IP.value

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]):
        try:
            return ipaddress.ip_address(str(value).strip())
        except ValueError:
            self.fail(f"{value!r} is not an IP address", param, ctx)


class IPNetwork(click.ParamType):
    """CIDR network option such as ``192.168.1.0/24``."""

    name = "cidr"
    flag_type = FlagType.IP_NET.value

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]):
        try:
            return ipaddress.ip_network(str(value).strip(), strict=False)
        except ValueError:
            self.fail(f"{value!r} is not a CIDR network", param, ctx)


class IPMask(click.ParamType):
    """Dotted network mask option such as ``255.255.255.0``."""

    name = "ipmask"
    flag_type = FlagType.IP_MASK.value

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]):
        try:
            network = ipaddress.IPv4Network(f"0.0.0.0/{str(value).strip()}")
        except ValueError:
            self.fail(f"{value!r} is not a network mask", param, ctx)
        return network.netmask


class HexBytes(click.ParamType):
    """Hex-encoded byte string option."""

    name = "hex"
    flag_type = FlagType.BYTES_HEX.value

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> bytes:
        if isinstance(value, bytes):
            return value
        try:
            return bytes.fromhex(str(value))
        except ValueError:
            self.fail(f"{value!r} is not a hexadecimal string", param, ctx)


class Base64Bytes(click.ParamType):
    """Base64-encoded byte string option."""

    name = "base64"
    flag_type = FlagType.BYTES_BASE64.value

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> bytes:
        if isinstance(value, bytes):
            return value
        try:
            return base64.b64decode(str(value), validate=True)
        except (binascii.Error, ValueError):
            self.fail(f"{value!r} is not base64 encoded", param, ctx)


class JSONValue(click.ParamType):
    """Option whose value is a JSON document described by *schema*.

    The schema is published verbatim as the flag's input schema, and the
    bridge serializes the agent's value back to compact JSON on the command
    line.
    """

    name = "json"

    def __init__(self, schema: dict[str, Any]) -> None:
        self.json_schema = dict(schema)

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> Any:
        if not isinstance(value, str):
            return value
        try:
            return json.loads(value)
        except json.JSONDecodeError as exc:
            self.fail(f"invalid JSON: {exc.msg}", param, ctx)
