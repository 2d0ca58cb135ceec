"""Selector chain and tool compilation.

* :mod:`~clibridge.compiler.selectors` -- :class:`Selector`, the safety
  filters and predicate helpers.
* :mod:`~clibridge.compiler.tools` -- :func:`compile_tools`, the tree walk
  that produces :class:`CompiledTool` values.
"""

from clibridge.compiler.selectors import (
    ALWAYS,
    Selector,
    allow_cmds,
    allow_cmds_containing,
    allow_flags,
    exclude_cmds,
    exclude_cmds_containing,
    exclude_flags,
    no_flags,
)
from clibridge.compiler.tools import CompiledTool, FlagBinding, compile_tool, compile_tools

__all__ = [
    "ALWAYS",
    "CompiledTool",
    "FlagBinding",
    "Selector",
    "allow_cmds",
    "allow_cmds_containing",
    "allow_flags",
    "compile_tool",
    "compile_tools",
    "exclude_cmds",
    "exclude_cmds_containing",
    "exclude_flags",
    "no_flags",
]
