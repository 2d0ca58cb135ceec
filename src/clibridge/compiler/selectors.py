"""Selectors decide which commands become tools and which flags they expose.

A :class:`Selector` pairs a command predicate with flag predicates and
optional middleware. Selectors are tried in order for every command; the
first one whose ``cmd_selector`` accepts the command is bound to it, and no
later selector is consulted for that command.

Before any selector runs, the safety filter rejects hidden, deprecated and
non-runnable commands, and commands whose path contains one of the reserved
segments ``mcp``, ``help`` or ``completion``. Hidden and deprecated flags,
and the help/completion options typer adds, are likewise removed before the
flag predicates see them.

Example::

    Config(selectors=[
        Selector(
            cmd_selector=allow_cmds_containing("get", "list"),
            local_flag_selector=exclude_flags("token"),
        ),
        Selector(cmd_selector=exclude_cmds("kubectl delete")),
    ])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from clibridge.models import FlagDescriptor
from clibridge.tree.nodes import CommandNode

logger = logging.getLogger(__name__)

CmdPredicate = Callable[[CommandNode], bool]
FlagPredicate = Callable[[FlagDescriptor], bool]

# (ctx, request, payload) -> (ctx, request, payload), sync or async
PreRunHook = Callable[..., Any]
# (ctx, request, payload, result, output, error) -> (result, output, error), sync or async
PostRunHook = Callable[..., Any]

RESERVED_COMMANDS = ("mcp", "help", "completion")
RESERVED_FLAGS = ("help", "install-completion", "show-completion")


def ALWAYS(_: Any) -> bool:
    """Predicate that accepts everything."""
    return True


def no_flags(_: FlagDescriptor) -> bool:
    """Flag predicate that rejects every flag."""
    return False


@dataclass
class Selector:
    """One rule of the selector chain.

    Any predicate left as ``None`` accepts everything.
    """

    cmd_selector: Optional[CmdPredicate] = None
    local_flag_selector: Optional[FlagPredicate] = None
    inherited_flag_selector: Optional[FlagPredicate] = None
    pre_run: Optional[PreRunHook] = None
    post_run: Optional[PostRunHook] = None

    def select_cmd(self, node: CommandNode) -> bool:
        return (self.cmd_selector or ALWAYS)(node)

    def select_local_flag(self, flag: FlagDescriptor) -> bool:
        return flag_is_safe(flag) and (self.local_flag_selector or ALWAYS)(flag)

    def select_inherited_flag(self, flag: FlagDescriptor) -> bool:
        return flag_is_safe(flag) and (self.inherited_flag_selector or ALWAYS)(flag)


# ---------------------------------------------------------------------------
# Safety filters
# ---------------------------------------------------------------------------


def cmd_is_safe(node: CommandNode) -> bool:
    """Whether *node* may be exposed at all, regardless of selectors."""
    if node.hidden:
        logger.debug("Skipping command %r: hidden", node.command_path)
        return False
    if node.deprecated:
        logger.debug("Skipping command %r: deprecated", node.command_path)
        return False
    if not node.runnable:
        logger.debug("Skipping command %r: not runnable", node.command_path)
        return False
    for segment in node.path[1:]:
        if segment in RESERVED_COMMANDS:
            logger.debug("Skipping command %r: reserved name %r", node.command_path, segment)
            return False
    return True


def flag_is_safe(flag: FlagDescriptor) -> bool:
    if flag.hidden or flag.deprecated:
        return False
    return flag.name not in RESERVED_FLAGS


# ---------------------------------------------------------------------------
# Predicate helpers
# ---------------------------------------------------------------------------


def allow_cmds_containing(*phrases: str) -> CmdPredicate:
    """Accept commands whose path contains any of *phrases*."""

    def select(node: CommandNode) -> bool:
        path = node.command_path
        if any(phrase in path for phrase in phrases):
            return True
        logger.debug("Command %r not in allow list %r", path, phrases)
        return False

    return select


def exclude_cmds_containing(*phrases: str) -> CmdPredicate:
    """Reject commands whose path contains any of *phrases*."""

    def select(node: CommandNode) -> bool:
        path = node.command_path
        for phrase in phrases:
            if phrase in path:
                logger.debug("Command %r excluded by phrase %r", path, phrase)
                return False
        return True

    return select


def allow_cmds(*paths: str) -> CmdPredicate:
    """Accept only commands whose full path (``"app sub cmd"``) is listed."""
    return lambda node: node.command_path in paths


def exclude_cmds(*paths: str) -> CmdPredicate:
    """Reject commands whose full path is listed."""
    return lambda node: node.command_path not in paths


def allow_flags(*names: str) -> FlagPredicate:
    """Accept only flags whose name is listed."""
    return lambda flag: flag.name in names


def exclude_flags(*names: str) -> FlagPredicate:
    """Reject flags whose name is listed."""
    return lambda flag: flag.name not in names
