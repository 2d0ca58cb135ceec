"""MCP server exposing compiled tools.

:func:`create_server` registers the tools on the SDK's low-level
``Server``; :func:`serve_stdio` and :func:`serve_http` run it over stdio or
streamable HTTP (Starlette app served by uvicorn, endpoint ``/mcp``).

Tool calls run through :func:`clibridge.bridge.invoke`. An error returned by
the bridge is raised inside the handler, which the SDK reports to the agent
as an ``isError`` tool result. Otherwise the result carries the output both
as JSON text and as structured content.
"""

from __future__ import annotations

import contextlib
import json
import logging
from typing import Any, AsyncIterator, Optional, Sequence

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.routing import Mount

from clibridge.bridge.execute import InvocationContext, invoke
from clibridge.compiler.tools import CompiledTool
from clibridge.config import Config
from clibridge.exceptions import ConfigError, InvalidUsageError
from clibridge.models import ToolInput

logger = logging.getLogger(__name__)

HTTP_PATH = "/mcp"


def create_server(config: Config, tools: Sequence[CompiledTool], name: Optional[str] = None) -> Server:
    """Build a low-level MCP server serving *tools*.

    Args:
        config: Server identity, instructions and per-call timeout.
        tools: The compiled tools to expose.
        name: Fallback server name when ``config.server_name`` is unset.
    """
    server: Server = Server(
        config.server_name or name or "clibridge",
        version=config.server_version,
        instructions=config.instructions,
    )
    index = {compiled.name: compiled for compiled in tools}

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [compiled.tool for compiled in tools]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]):
        compiled = index.get(name)
        if compiled is None:
            raise InvalidUsageError(f"Unknown tool: {name}")
        try:
            payload = ToolInput.model_validate(arguments or {})
        except ValidationError as exc:
            raise InvalidUsageError(f"Invalid arguments for {name}: {exc}") from exc

        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name=name, arguments=arguments),
        )
        ctx = InvocationContext(tool_name=name, timeout=config.timeout)
        result, output, error = await invoke(ctx, compiled, request, payload)
        if error is not None:
            logger.warning("Tool %s failed: %s", name, error)
            raise error

        structured = output.model_dump(by_alias=True)
        logger.info("Tool %s exited with code %d", name, output.exit_code)
        if result is not None:
            return list(result.content), result.structuredContent or structured
        text = types.TextContent(type="text", text=json.dumps(structured, ensure_ascii=False))
        return [text], structured

    logger.debug("Registered %d tools", len(tools))
    return server


async def serve_stdio(server: Server) -> None:
    """Serve over stdin/stdout until the client disconnects."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def create_http_app(server: Server) -> Starlette:
    """Starlette app mounting the streamable HTTP transport at :data:`HTTP_PATH`."""
    manager = StreamableHTTPSessionManager(app=server)

    async def handle(scope, receive, send) -> None:
        await manager.handle_request(scope, receive, send)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        async with manager.run():
            logger.info("Streamable HTTP session manager started")
            yield

    return Starlette(routes=[Mount(HTTP_PATH, app=handle)], lifespan=lifespan)


async def serve_http(
    server: Server,
    host: str = "127.0.0.1",
    port: int = 8080,
    cert_file: Optional[str] = None,
    key_file: Optional[str] = None,
    log_level: str = "info",
) -> None:
    """Serve over streamable HTTP, with TLS when both *cert_file* and *key_file* are set.

    Raises:
        ConfigError: If only one of *cert_file* and *key_file* is given.
    """
    import uvicorn

    if bool(cert_file) != bool(key_file):
        raise ConfigError("Both --cert-file and --key-file must be provided for TLS")

    scheme = "https" if cert_file else "http"
    logger.info("Serving MCP on %s://%s:%d%s", scheme, host, port, HTTP_PATH)
    uv_config = uvicorn.Config(
        create_http_app(server),
        host=host,
        port=port,
        ssl_certfile=cert_file,
        ssl_keyfile=key_file,
        log_level=log_level if log_level != "warn" else "warning",
    )
    await uvicorn.Server(uv_config).serve()
