"""CLI surface: the ``mcp`` command group host applications mount."""

from clibridge.commands.mcp import mcp_app, mcp_command

__all__ = ["mcp_app", "mcp_command"]
