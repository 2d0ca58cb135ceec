"""The ``mcp`` command group mounted into a host application.

Provides:

* ``mcp start`` -- serve the host's commands as MCP tools over stdio.
* ``mcp stream`` -- serve them over streamable HTTP.
* ``mcp tools`` -- export the compiled tool definitions to a JSON file.
* ``mcp claude|vscode|cursor enable|disable|list`` -- manage this program's
  registration in editor MCP configs.

The host's command tree is discovered from the click context, so the group
works wherever it is mounted::

    app.add_typer(mcp_app(Config(...)), name="mcp")   # typer
    cli.add_command(mcp_command(Config(...)))         # click
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import click
import typer

from clibridge.bridge.execute import resolve_self_command
from clibridge.compiler.tools import CompiledTool, compile_tools
from clibridge.config import Config
from clibridge.editors import EDITORS, EditorConfigManager
from clibridge.exceptions import ClibridgeError, InvalidUsageError
from clibridge.log import configure_logging
from clibridge.output import error, info, print_table, success
from clibridge.server import create_server, serve_http, serve_stdio
from clibridge.tree.nodes import CommandNode

MCP_COMMAND_NAME = "mcp"
DEFAULT_TOOLS_FILE = "mcp-tools.json"


# ---------------------------------------------------------------------------
# Context helpers
# ---------------------------------------------------------------------------


def _program_name(ctx: click.Context) -> str:
    root = ctx.find_root()
    return root.command.name or Path(root.info_name or "cli").stem


def _root_node(ctx: click.Context) -> CommandNode:
    root = ctx.find_root()
    return CommandNode.from_root(root.command, _program_name(ctx))


def _compile(ctx: click.Context, config: Config) -> list[CompiledTool]:
    return compile_tools(_root_node(ctx), config)


def _mcp_path(ctx: click.Context) -> list[str]:
    """Sub-command names from below the root down to the ``mcp`` group."""
    names: list[str] = []
    current: Optional[click.Context] = ctx
    while current is not None and current.parent is not None:
        names.append(current.info_name or "")
        current = current.parent
    names.reverse()
    if MCP_COMMAND_NAME not in names:
        raise InvalidUsageError(f"Command {MCP_COMMAND_NAME!r} not found in {' '.join(names)!r}")
    return names[: names.index(MCP_COMMAND_NAME) + 1]


def _fail(exc: ClibridgeError) -> typer.Exit:
    error(str(exc))
    return typer.Exit(code=exc.exit_code)


# ---------------------------------------------------------------------------
# Editor sub-groups
# ---------------------------------------------------------------------------


def _editor_app(key: str, config: Config) -> typer.Typer:
    manager_cls = EDITORS[key]
    label = manager_cls.label
    supports_workspace = key != "claude"
    app = typer.Typer(no_args_is_help=True, help=f"Manage the {label} MCP server registration.")

    def open_manager(config_path: Optional[Path], workspace: bool) -> EditorConfigManager:
        if supports_workspace:
            return manager_cls(config_path, workspace=workspace)
        return manager_cls(config_path)

    @app.command("enable")
    def enable(
        ctx: typer.Context,
        server_name: Optional[str] = typer.Option(
            None, "--server-name", help="Name of the MCP server entry (default: program name)."
        ),
        config_path: Optional[Path] = typer.Option(
            None, "--config-path", help=f"Path to the {label} config file."
        ),
        log_level: Optional[str] = typer.Option(
            None, "--log-level", help="Log level passed to 'mcp start' (debug, info, warn, error)."
        ),
        workspace: bool = typer.Option(
            False, "--workspace", hidden=not supports_workspace,
            help="Use the workspace config in the current directory.",
        ),
    ) -> None:
        """Register this program as an MCP server."""
        try:
            command = resolve_self_command()
            args = [*command[1:], *_mcp_path(ctx), "start"]
            if log_level:
                args += ["--log-level", log_level]
            name = server_name or config.server_name or _program_name(ctx)
            manager = open_manager(config_path, workspace)
            manager.enable_server(name, manager.server_entry(command[0], args))
        except ClibridgeError as exc:
            raise _fail(exc) from exc
        success(f"Enabled MCP server {name!r} in {label} config: {manager.path}")

    @app.command("disable")
    def disable(
        ctx: typer.Context,
        server_name: Optional[str] = typer.Option(
            None, "--server-name", help="Name of the MCP server entry (default: program name)."
        ),
        config_path: Optional[Path] = typer.Option(
            None, "--config-path", help=f"Path to the {label} config file."
        ),
        workspace: bool = typer.Option(
            False, "--workspace", hidden=not supports_workspace,
            help="Use the workspace config in the current directory.",
        ),
    ) -> None:
        """Remove this program's MCP server entry."""
        name = server_name or config.server_name or _program_name(ctx)
        try:
            manager = open_manager(config_path, workspace)
            removed = manager.disable_server(name)
        except ClibridgeError as exc:
            raise _fail(exc) from exc
        if removed:
            success(f"Disabled MCP server {name!r} in {label} config: {manager.path}")

    @app.command("list")
    def list_servers(
        config_path: Optional[Path] = typer.Option(
            None, "--config-path", help=f"Path to the {label} config file."
        ),
        workspace: bool = typer.Option(
            False, "--workspace", hidden=not supports_workspace,
            help="Use the workspace config in the current directory.",
        ),
    ) -> None:
        """List the MCP servers configured for this editor."""
        try:
            manager = open_manager(config_path, workspace)
            servers = manager.servers()
        except ClibridgeError as exc:
            raise _fail(exc) from exc
        if not servers:
            info(f"No MCP servers configured in {manager.path}")
            return
        rows = [
            [
                name,
                getattr(entry, "command", None) or getattr(entry, "url", None) or "",
                " ".join(getattr(entry, "args", None) or []),
            ]
            for name, entry in servers.items()
        ]
        print_table(["Name", "Command", "Args"], rows, title=f"{label} MCP servers")

    return app


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def mcp_app(config: Optional[Config] = None) -> typer.Typer:
    """Build the typer ``mcp`` sub-application for *config*."""
    config = config or Config()
    app = typer.Typer(
        name=MCP_COMMAND_NAME,
        no_args_is_help=True,
        help="Serve this program's commands as MCP tools.",
    )

    @app.command("start")
    def start(
        ctx: typer.Context,
        log_level: Optional[str] = typer.Option(
            None, "--log-level", help="Log level (debug, info, warn, error)."
        ),
    ) -> None:
        """Start the MCP server on stdin/stdout."""
        configure_logging(log_level or config.log_level)
        server = create_server(config, _compile(ctx, config), _program_name(ctx))
        asyncio.run(serve_stdio(server))

    @app.command("stream")
    def stream(
        ctx: typer.Context,
        host: str = typer.Option("127.0.0.1", "--host", help="Interface to listen on."),
        port: int = typer.Option(8080, "--port", help="Port to listen on."),
        cert_file: Optional[Path] = typer.Option(None, "--cert-file", help="TLS certificate file."),
        key_file: Optional[Path] = typer.Option(None, "--key-file", help="TLS private key file."),
        log_level: Optional[str] = typer.Option(
            None, "--log-level", help="Log level (debug, info, warn, error)."
        ),
    ) -> None:
        """Start the MCP server over streamable HTTP."""
        if (cert_file is None) != (key_file is None):
            error("Both --cert-file and --key-file must be provided for TLS")
            raise typer.Exit(code=2)
        level = log_level or config.log_level
        configure_logging(level)
        server = create_server(config, _compile(ctx, config), _program_name(ctx))
        try:
            asyncio.run(
                serve_http(
                    server,
                    host=host,
                    port=port,
                    cert_file=str(cert_file) if cert_file else None,
                    key_file=str(key_file) if key_file else None,
                    log_level=level,
                )
            )
        except ClibridgeError as exc:
            raise _fail(exc) from exc

    @app.command("tools")
    def tools(
        ctx: typer.Context,
        output: Path = typer.Option(
            Path(DEFAULT_TOOLS_FILE), "--output", "-o", help="File to write the tool list to."
        ),
    ) -> None:
        """Export the MCP tool definitions as JSON."""
        compiled = _compile(ctx, config)
        data = [
            item.tool.model_dump(mode="json", by_alias=True, exclude_none=True)
            for item in compiled
        ]
        output.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        success(f"Successfully exported {len(compiled)} tools to {output}")

    for key in EDITORS:
        app.add_typer(_editor_app(key, config), name=key)

    return app


def mcp_command(config: Optional[Config] = None) -> click.Command:
    """The ``mcp`` group as a plain click command, for click applications."""
    command = typer.main.get_command(mcp_app(config))
    command.name = MCP_COMMAND_NAME
    return command
