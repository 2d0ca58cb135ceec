"""Read-only view of a click command tree.

:class:`CommandNode` wraps one ``click.Command`` together with the
``click.Context`` chain that leads to it from the root. The compiler only
talks to nodes, never to click directly, so typer applications work as long
as they are converted with ``typer.main.get_command`` first.
"""

from __future__ import annotations

from typing import Iterator, Optional

import click

from clibridge.annotations import EXAMPLES, command_annotations
from clibridge.models import FlagDescriptor
from clibridge.tree.flags import describe_flag


class CommandNode:
    """One command in the tree, with its ancestry.

    Args:
        command: The wrapped click command or group.
        ctx: A click context whose ``info_name`` is this command's segment
            name and whose parents mirror the ancestor chain.
        parent: The parent node, or ``None`` for the root.
    """

    def __init__(
        self,
        command: click.Command,
        ctx: click.Context,
        parent: Optional[CommandNode] = None,
    ) -> None:
        self.command = command
        self.ctx = ctx
        self.parent = parent

    @classmethod
    def from_root(cls, command: click.Command, name: Optional[str] = None) -> CommandNode:
        """Build the root node of a command tree.

        Args:
            command: The root click command or group.
            name: The program name. Defaults to the command's own name.
                Underscores are replaced with dashes because tool names use
                ``_`` as the segment separator.
        """
        info_name = (name or command.name or "cli").replace("_", "-")
        return cls(command, click.Context(command, info_name=info_name))

    def __repr__(self) -> str:
        return f"CommandNode({self.command_path!r})"

    # ------------------------------------------------------------------ #
    # Identity
    # ------------------------------------------------------------------ #

    @property
    def name(self) -> str:
        return self.ctx.info_name or ""

    @property
    def path(self) -> list[str]:
        """Segment names from the root down to this node."""
        names: list[str] = []
        node: Optional[CommandNode] = self
        while node is not None:
            names.append(node.name)
            node = node.parent
        return names[::-1]

    @property
    def command_path(self) -> str:
        return " ".join(self.path)

    @property
    def depth(self) -> int:
        return len(self.path) - 1

    # ------------------------------------------------------------------ #
    # Status
    # ------------------------------------------------------------------ #

    @property
    def hidden(self) -> bool:
        return bool(self.command.hidden)

    @property
    def deprecated(self) -> bool:
        return bool(getattr(self.command, "deprecated", False))

    @property
    def runnable(self) -> bool:
        """Whether invoking this node runs a handler.

        A group only counts when it runs its callback without a sub-command.
        """
        if self.command.callback is None:
            return False
        if isinstance(self.command, click.Group):
            return bool(self.command.invoke_without_command)
        return True

    # ------------------------------------------------------------------ #
    # Structure
    # ------------------------------------------------------------------ #

    def children(self) -> Iterator[CommandNode]:
        """Yield the sub-commands of a group, in the group's listing order."""
        if not isinstance(self.command, click.Group):
            return
        for segment in self.command.list_commands(self.ctx):
            sub = self.command.get_command(self.ctx, segment)
            if sub is None:
                continue
            yield CommandNode(sub, click.Context(sub, info_name=segment, parent=self.ctx), self)

    def local_options(self) -> list[click.Option]:
        return [p for p in self.command.params if isinstance(p, click.Option)]

    def inherited_options(self) -> list[tuple[int, click.Option]]:
        """Options declared on ancestor groups, nearest ancestor first.

        Each entry pairs the option with the depth of the declaring group.
        """
        found: list[tuple[int, click.Option]] = []
        node = self.parent
        while node is not None:
            found.extend((node.depth, option) for option in node.local_options())
            node = node.parent
        return found

    def local_flags(self) -> list[FlagDescriptor]:
        return [describe_flag(option) for option in self.local_options()]

    def inherited_flags(self) -> list[FlagDescriptor]:
        return [describe_flag(option, depth) for depth, option in self.inherited_options()]

    # ------------------------------------------------------------------ #
    # Help text
    # ------------------------------------------------------------------ #

    @property
    def long_help(self) -> str:
        text = self.command.help or ""
        return text.split("\f", 1)[0].strip()

    @property
    def short_help(self) -> str:
        return (self.command.short_help or "").strip()

    @property
    def annotations(self) -> dict[str, str]:
        return command_annotations(self.command)

    @property
    def example(self) -> str:
        """Usage examples: the ``examples`` annotation, else the command epilog."""
        return (self.annotations.get(EXAMPLES) or self.command.epilog or "").strip()

    @property
    def usage(self) -> str:
        """Usage line: the command name followed by its usage pieces."""
        pieces = self.command.collect_usage_pieces(self.ctx)
        return " ".join([self.name, *pieces])
