"""Compile a command tree into MCP tools.

The walk is depth-first with children visited before their parent. Each
command that survives the safety filter is matched against the selector
chain; the first selector that accepts it produces one :class:`CompiledTool`.

A compiled tool carries, next to the ``mcp.types.Tool`` an agent sees, the
per-flag :class:`FlagBinding` records the invocation bridge needs to turn a
payload back into a command line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Union

import click
from mcp import types

from clibridge.annotations import tool_annotations
from clibridge.compiler.selectors import Selector, cmd_is_safe
from clibridge.models import FlagDescriptor
from clibridge.schema.templates import (
    SchemaTemplates,
    build_flags_schema,
    build_input_schema,
    select_flags,
)
from clibridge.tree.flags import flag_negation, flag_opt
from clibridge.tree.nodes import CommandNode

if TYPE_CHECKING:
    from clibridge.config import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlagBinding:
    """How one exposed flag is written back onto a command line.

    Attributes:
        name: Flag name as it appears in the ``flags`` payload.
        opt: Option string to emit (``--name`` or ``-n``).
        depth: Command-path index of the declaring group for inherited
            flags, ``None`` for local flags.
        switch: The option is a switch that takes no value.
        count: The option is a counter, repeated once per increment.
        negation: Secondary option (``--no-name``) of a switch, if any.
        json_encoded: The value is serialized as compact JSON.
    """

    name: str
    opt: str
    depth: Optional[int] = None
    switch: bool = False
    negation: Optional[str] = None
    count: bool = False
    json_encoded: bool = False


@dataclass
class CompiledTool:
    """A tool definition bound to the selector that produced it.

    ``segments`` is the sub-command path below the root. Tool names join
    segments with ``_``, so a command whose own name contains ``_`` can only
    be found again through this path.
    """

    tool: types.Tool
    selector: Selector
    bindings: dict[str, FlagBinding] = field(default_factory=dict)
    segments: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.tool.name


def tool_name(node: CommandNode, prefix: Optional[str] = None) -> str:
    """Join the command path with ``_``; *prefix* replaces the root segment."""
    segments = node.path
    if prefix:
        segments = [prefix, *segments[1:]]
    return "_".join(segments)


def tool_description(node: CommandNode) -> str:
    """Long help, else short help, else a generic line; examples appended."""
    description = node.long_help or node.short_help or f"Execute the {node.name} command"
    example = node.example
    if example:
        return "\n".join([description, f"Examples:\n{example}"])
    return description


def _binding(flag: FlagDescriptor, option: click.Option) -> FlagBinding:
    return FlagBinding(
        name=flag.name,
        opt=flag_opt(option),
        depth=flag.depth,
        switch=bool(option.is_flag),
        negation=flag_negation(option),
        count=bool(option.count),
        json_encoded=flag.schema_override is not None,
    )


def compile_tool(
    node: CommandNode,
    selector: Selector,
    prefix: Optional[str] = None,
    templates: Optional[SchemaTemplates] = None,
) -> CompiledTool:
    """Build the tool for one command under *selector*."""
    templates = templates or SchemaTemplates()
    local = node.local_flags()
    inherited = node.inherited_flags()
    options: dict[int, click.Option] = {
        id(flag): option for flag, option in zip(local, node.local_options())
    }
    options.update(
        (id(flag), option) for flag, (_, option) in zip(inherited, node.inherited_options())
    )

    selected = select_flags(
        local,
        inherited,
        selector.select_local_flag,
        selector.select_inherited_flag,
    )
    input_schema = build_input_schema(build_flags_schema(selected), node.usage, templates)

    tool = types.Tool(
        name=tool_name(node, prefix),
        description=tool_description(node),
        inputSchema=input_schema,
        outputSchema=templates.output_schema(),
        annotations=tool_annotations(node.annotations),
    )
    bindings = {flag.name: _binding(flag, options[id(flag)]) for flag in selected}
    return CompiledTool(
        tool=tool,
        selector=selector,
        bindings=bindings,
        segments=tuple(node.path[1:]),
    )


def compile_tools(
    root: Union[CommandNode, click.Command],
    config: Optional[Config] = None,
) -> list[CompiledTool]:
    """Walk the tree under *root* and compile every selected command.

    Args:
        root: The root node, or a root click command (its own name is used
            as the program name).
        config: Selector chain and naming options. Defaults to a catch-all
            selector.

    Returns:
        Compiled tools in walk order (children before parents).
    """
    if config is None:
        from clibridge.config import Config

        config = Config()
    if isinstance(root, click.Command):
        root = CommandNode.from_root(root)

    selectors = config.effective_selectors()
    templates = SchemaTemplates()
    compiled: list[CompiledTool] = []

    def walk(node: CommandNode) -> None:
        for child in node.children():
            walk(child)
        if not cmd_is_safe(node):
            return
        for selector in selectors:
            if selector.select_cmd(node):
                compiled.append(compile_tool(node, selector, config.tool_name_prefix, templates))
                return
        logger.debug("No selector matched command %r", node.command_path)

    walk(root)
    logger.info("Compiled %d tools from %r", len(compiled), root.command_path)
    return compiled
