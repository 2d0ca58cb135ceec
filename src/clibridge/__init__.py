"""clibridge -- expose a click or typer command tree as MCP tools.

Every runnable command of the host application becomes a Model Context
Protocol tool whose input schema is derived from the command's options. A
tool call is turned back into a command line, the running program is
re-executed with it, and stdout, stderr and the exit code are returned to
the agent.

Typical use::

    import typer
    from clibridge import Config, Selector, mcp_app, exclude_cmds_containing

    app = typer.Typer()
    ...
    app.add_typer(
        mcp_app(Config(selectors=[Selector(cmd_selector=exclude_cmds_containing("delete"))])),
        name="mcp",
    )

Then ``myapp mcp start`` serves the tools over stdio, and
``myapp mcp claude enable`` registers the server with Claude Desktop.

Modules:
    tree: Read-only adapters over click command trees.
    schema: JSON-Schema synthesis for flags and arguments.
    compiler: Selector chain and tool compilation.
    bridge: Argument reconstruction and self re-execution.
    server: MCP server over stdio or streamable HTTP.
    editors: Claude Desktop, VS Code and Cursor registration.
    commands: The ``mcp`` command group.
"""

__version__ = "0.1.0"

from clibridge.annotations import annotate
from clibridge.commands import mcp_app, mcp_command
from clibridge.compiler import (
    CompiledTool,
    Selector,
    allow_cmds,
    allow_cmds_containing,
    allow_flags,
    compile_tools,
    exclude_cmds,
    exclude_cmds_containing,
    exclude_flags,
    no_flags,
)
from clibridge.config import Config

__all__ = [
    "CompiledTool",
    "Config",
    "Selector",
    "__version__",
    "allow_cmds",
    "allow_cmds_containing",
    "allow_flags",
    "annotate",
    "compile_tools",
    "exclude_cmds",
    "exclude_cmds_containing",
    "exclude_flags",
    "mcp_app",
    "mcp_command",
    "no_flags",
]
