"""Schema template registry and input-schema assembly.

The input and output schemas of every tool start from the JSON schemas of
:class:`~clibridge.models.ToolInput` and :class:`~clibridge.models.ToolOutput`.
They are generated once per :class:`SchemaTemplates` and handed out as deep
copies, so assembling one tool can never leak into another. There is no
shared instance: :func:`~clibridge.compiler.compile_tools` builds one
registry per compilation and passes it down.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Iterable, Optional

from clibridge.models import FlagDescriptor, ToolInput, ToolOutput
from clibridge.schema.fragments import fragment_for, required_for

logger = logging.getLogger(__name__)

ARGS_DESCRIPTION = "Positional command line arguments"

FlagPredicate = Callable[[FlagDescriptor], bool]


def _strip_titles(schema: Any) -> Any:
    """Drop pydantic's generated ``title`` keys, recursively."""
    if isinstance(schema, dict):
        return {
            key: _strip_titles(value)
            for key, value in schema.items()
            if not (key == "title" and isinstance(value, str))
        }
    if isinstance(schema, list):
        return [_strip_titles(item) for item in schema]
    return schema


class SchemaTemplates:
    """Immutable source of the base input and output schemas."""

    def __init__(self) -> None:
        self._input = _strip_titles(ToolInput.model_json_schema())
        self._output = _strip_titles(ToolOutput.model_json_schema(by_alias=True))

    def input_schema(self) -> dict[str, Any]:
        return copy.deepcopy(self._input)

    def output_schema(self) -> dict[str, Any]:
        return copy.deepcopy(self._output)


def select_flags(
    local_flags: Iterable[FlagDescriptor],
    inherited_flags: Iterable[FlagDescriptor],
    local_selector: FlagPredicate,
    inherited_selector: FlagPredicate,
) -> list[FlagDescriptor]:
    """Choose the flags a tool exposes, in schema order.

    Local flags are visited first. An inherited flag whose name is already
    taken is skipped. Hidden and deprecated flags never reach the
    predicates.
    """
    selected: dict[str, FlagDescriptor] = {}

    def visit(flags: Iterable[FlagDescriptor], selector: FlagPredicate, kind: str) -> None:
        for flag in flags:
            if flag.hidden or flag.deprecated:
                logger.debug("Skipping %s flag %r: hidden or deprecated", kind, flag.name)
                continue
            if flag.name in selected:
                continue
            if not selector(flag):
                logger.debug("Skipping %s flag %r: rejected by selector", kind, flag.name)
                continue
            selected[flag.name] = flag

    visit(local_flags, local_selector, "local")
    visit(inherited_flags, inherited_selector, "inherited")
    return list(selected.values())


def build_flags_schema(flags: Iterable[FlagDescriptor]) -> dict[str, Any]:
    """Assemble the ``flags`` object schema from already selected flags."""
    properties: dict[str, Any] = {}
    required: list[str] = []
    for flag in flags:
        properties[flag.name] = fragment_for(flag)
        if required_for(flag):
            required.append(flag.name)

    schema: dict[str, Any] = {
        "type": "object",
        "description": "Flag options",
        "properties": properties,
        "additionalProperties": False,
    }
    if required:
        schema["required"] = required
    return schema


def usage_pattern(usage: str) -> str:
    """Reduce a usage line to its positional pattern.

    The line starts with the command name (``cmd [OPTIONS] FILE``). Option
    placeholders and everything up to the first space are removed.
    """
    text = usage.replace("[OPTIONS]", "").replace("[flags]", "")
    text = " ".join(text.split())
    _, _, rest = text.partition(" ")
    return rest


def args_description(usage: str) -> str:
    """Description of the ``args`` property, including the usage pattern if any."""
    pattern = usage_pattern(usage)
    if not pattern:
        return ARGS_DESCRIPTION
    return f"{ARGS_DESCRIPTION}\nUsage pattern: {pattern}"


def build_input_schema(
    flags_schema: dict[str, Any],
    usage: str,
    templates: Optional[SchemaTemplates] = None,
) -> dict[str, Any]:
    """Combine the ``flags`` schema and the ``args`` description into a tool input schema."""
    schema = (templates or SchemaTemplates()).input_schema()
    properties = schema.setdefault("properties", {})
    properties["flags"] = flags_schema
    args = properties.setdefault("args", {"type": "string"})
    args["description"] = args_description(usage)
    return schema
