"""Map flag descriptors to JSON-Schema fragments and typed defaults.

**Type mapping:**

* ``bool`` -> ``boolean``; integer tags and ``count`` -> ``integer``;
  ``float32``/``float64`` -> ``number``; ``string`` -> ``string``.
* Slice tags -> ``array`` with typed ``items``.
* ``stringToString`` / ``stringToInt`` / ``stringToInt64`` -> ``object`` whose
  ``additionalProperties`` carry the value type.
* ``duration``, ``ip``, ``ipMask``, ``ipNet``, ``bytesHex``, ``bytesBase64``
  -> ``string`` with a format note in the description and, except for
  ``ipMask``, a validation ``pattern``.
* Anything else -> ``string`` with a ``(type: <label>)`` note.

A descriptor's ``schema_override`` replaces the mapping entirely.

Defaults are parsed from the raw-string convention. A malformed default
never fails synthesis: the bad element (or the whole default) is dropped and
logged.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Callable, Optional

from clibridge.models import FlagDescriptor, FlagType
from clibridge.params import parse_bool

logger = logging.getLogger(__name__)


_INTEGER_TAGS = frozenset(
    {
        FlagType.INT.value,
        FlagType.INT8.value,
        FlagType.INT16.value,
        FlagType.INT32.value,
        FlagType.INT64.value,
        FlagType.UINT.value,
        FlagType.UINT8.value,
        FlagType.UINT16.value,
        FlagType.UINT32.value,
        FlagType.UINT64.value,
        FlagType.COUNT.value,
    }
)

_ARRAY_ITEM_TYPES: dict[str, str] = {
    FlagType.STRING_SLICE.value: "string",
    FlagType.STRING_ARRAY.value: "string",
    FlagType.INT_SLICE.value: "integer",
    FlagType.INT32_SLICE.value: "integer",
    FlagType.INT64_SLICE.value: "integer",
    FlagType.UINT_SLICE.value: "integer",
    FlagType.FLOAT32_SLICE.value: "number",
    FlagType.FLOAT64_SLICE.value: "number",
    FlagType.BOOL_SLICE.value: "boolean",
}

_MAP_VALUE_TYPES: dict[str, str] = {
    FlagType.STRING_TO_STRING.value: "string",
    FlagType.STRING_TO_INT.value: "integer",
    FlagType.STRING_TO_INT64.value: "integer",
}

_IPV4 = r"((25[0-5]|(2[0-4]|1\d|[1-9]|)\d)\.){3}(25[0-5]|(2[0-4]|1\d|[1-9]|)\d)"

# tag -> (description suffix, pattern)
_FORMATTED_STRINGS: dict[str, tuple[str, Optional[str]]] = {
    FlagType.DURATION.value: (
        " (format: Go duration string, e.g., '10s', '2h45m')",
        r"^-?([0-9]+(\.[0-9]+)?(ns|us|µs|ms|s|m|h))+$",
    ),
    FlagType.IP.value: (
        " (format: IPv4 or IPv6 address)",
        rf"^{_IPV4}$|^(([0-9a-fA-F]{{1,4}}:){{7}}[0-9a-fA-F]{{1,4}})$",
    ),
    FlagType.IP_MASK.value: (
        " (format: IP mask, e.g., '255.255.255.0')",
        None,
    ),
    FlagType.IP_NET.value: (
        " (format: CIDR notation, e.g., '192.168.1.0/24')",
        rf"^{_IPV4}/([0-9]|[1-2][0-9]|3[0-2])$",
    ),
    FlagType.BYTES_HEX.value: (
        " (format: hexadecimal string)",
        r"^[0-9a-fA-F]*$",
    ),
    FlagType.BYTES_BASE64.value: (
        " (format: base64 encoded string)",
        r"^[A-Za-z0-9+/]*={0,2}$",
    ),
}

_INTEGER_RE = re.compile(r"^[+-]?\d+$")


# ---------------------------------------------------------------------------
# Fragments
# ---------------------------------------------------------------------------


def fragment_for(flag: FlagDescriptor) -> dict[str, Any]:
    """Return the JSON-Schema fragment describing *flag*, default included."""
    if flag.schema_override is not None:
        fragment = dict(flag.schema_override)
        if "description" not in fragment:
            fragment["description"] = flag.usage
        return fragment

    tag = flag.type
    description = flag.usage
    fragment: dict[str, Any]

    if tag == FlagType.BOOL.value:
        fragment = {"type": "boolean"}
    elif tag in _INTEGER_TAGS:
        fragment = {"type": "integer"}
    elif tag in (FlagType.FLOAT32.value, FlagType.FLOAT64.value):
        fragment = {"type": "number"}
    elif tag == FlagType.STRING.value:
        fragment = {"type": "string"}
    elif tag in _ARRAY_ITEM_TYPES:
        fragment = {"type": "array", "items": {"type": _ARRAY_ITEM_TYPES[tag]}}
    elif tag in _MAP_VALUE_TYPES:
        value_type = _MAP_VALUE_TYPES[tag]
        fragment = {"type": "object", "additionalProperties": {"type": value_type}}
        if value_type == "integer":
            description += " (format: key-value pairs with integer values)"
        else:
            description += " (format: key-value pairs)"
    elif tag in _FORMATTED_STRINGS:
        suffix, pattern = _FORMATTED_STRINGS[tag]
        fragment = {"type": "string"}
        description += suffix
        if pattern is not None:
            fragment["pattern"] = pattern
    else:
        logger.debug("Unknown flag type %r for flag %r, using string schema", tag, flag.name)
        fragment = {"type": "string"}
        description += f" (type: {tag})"

    fragment["description"] = description
    if flag.choices:
        target = fragment["items"] if fragment["type"] == "array" else fragment
        target["enum"] = list(flag.choices)

    default = default_for(fragment, flag.default, flag.name)
    if default is not None:
        fragment["default"] = default
    return fragment


def required_for(flag: FlagDescriptor) -> bool:
    """Whether *flag* must appear in the flags object."""
    return flag.required


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


def default_for(fragment: dict[str, Any], raw: str, flag_name: str = "") -> Any:
    """Parse the raw default *raw* according to the fragment's ``type``.

    Returns ``None`` when there is no usable default: an empty string, an
    empty list (``[]``), an empty map, or a scalar that does not parse.
    """
    if raw == "":
        return None
    schema_type = fragment.get("type")

    if schema_type == "array":
        item_type = (fragment.get("items") or {}).get("type", "string")
        return _parse_array(raw, item_type, flag_name)
    if schema_type == "object":
        value_type = (fragment.get("additionalProperties") or {}).get("type", "string")
        return _parse_map(raw, value_type, flag_name)

    parser = _SCALAR_PARSERS.get(schema_type)
    if parser is None:
        return None
    try:
        return parser(raw)
    except ValueError:
        logger.warning("Ignoring invalid default %r for flag %r", raw, flag_name)
        return None


def _parse_integer(text: str) -> int:
    text = text.strip()
    if not _INTEGER_RE.match(text):
        raise ValueError(f"invalid integer {text!r}")
    return int(text, 10)


def _parse_number(text: str) -> float:
    value = float(text.strip())
    if not math.isfinite(value):
        raise ValueError(f"non-finite number {text!r}")
    return value


def _parse_boolean(text: str) -> bool:
    return parse_bool(text.strip())


_SCALAR_PARSERS: dict[Optional[str], Callable[[str], Any]] = {
    "boolean": _parse_boolean,
    "integer": _parse_integer,
    "number": _parse_number,
    "string": lambda text: text,
}


def _parse_array(raw: str, item_type: str, flag_name: str) -> Optional[list[Any]]:
    text = raw.strip()
    if not (text.startswith("[") and text.endswith("]")):
        logger.warning("Ignoring default %r for array flag %r: expected [...]", raw, flag_name)
        return None
    inner = text[1:-1].strip()
    if not inner:
        return None

    parser = _SCALAR_PARSERS.get(item_type, _SCALAR_PARSERS["string"])
    items: list[Any] = []
    for element in inner.split(","):
        element = element.strip()
        try:
            items.append(parser(element))
        except ValueError:
            logger.warning("Skipping invalid default element %r for flag %r", element, flag_name)
    return items or None


def _parse_map(raw: str, value_type: str, flag_name: str) -> Optional[dict[str, Any]]:
    text = raw.strip()
    if text.startswith("[") and text.endswith("]"):
        text = text[1:-1]
    if not text.strip():
        return None

    parser = _SCALAR_PARSERS.get(value_type, _SCALAR_PARSERS["string"])
    result: dict[str, Any] = {}
    for entry in text.split(","):
        key, sep, value = entry.partition("=")
        key = key.strip()
        if not sep or not key:
            logger.warning("Skipping malformed default entry %r for flag %r", entry, flag_name)
            continue
        try:
            result[key] = parser(value.strip())
        except ValueError:
            logger.warning("Skipping invalid default value %r for flag %r", entry, flag_name)
    return result or None
