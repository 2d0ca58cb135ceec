"""Tests for clibridge.server.

A real MCP client session is connected to the server in memory; tool calls
re-execute the sample application.

Covers:
- Server identity from Config
- tools/list returns the compiled tools
- tools/call: structured output, non-zero exits, unknown tools, invalid
  arguments, invocation errors, hook-supplied results
- A panicking hook leaves the server able to serve the next call
- HTTP app wiring and TLS argument validation
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import click
import pytest
from mcp import types
from mcp.shared.memory import create_connected_server_and_client_session

from clibridge.compiler.selectors import Selector
from clibridge.compiler.tools import compile_tools
from clibridge.config import Config
from clibridge.exceptions import ConfigError
from clibridge.server import HTTP_PATH, create_http_app, create_server, serve_http


def list_tools(server) -> types.ListToolsResult:
    async def main() -> types.ListToolsResult:
        async with create_connected_server_and_client_session(server) as session:
            return await session.list_tools()

    return asyncio.run(main())


def call_tool(server, name: str, arguments: Optional[dict[str, Any]] = None) -> types.CallToolResult:
    async def main() -> types.CallToolResult:
        async with create_connected_server_and_client_session(server) as session:
            return await session.call_tool(name, arguments or {})

    return asyncio.run(main())


@pytest.fixture
def server(sample_cli: click.Group):
    config = Config(server_version="1.2.3", timeout=30)
    return create_server(config, compile_tools(sample_cli, config), "sample")


class TestCreateServer:
    def test_identity(self) -> None:
        config = Config(server_name="custom", server_version="9.9", instructions="Be careful")
        srv = create_server(config, [], "sample")
        assert srv.name == "custom"
        assert srv.version == "9.9"
        assert srv.instructions == "Be careful"

    def test_name_fallback(self) -> None:
        assert create_server(Config(), [], "sample").name == "sample"

    def test_list_tools(self, server) -> None:
        result = list_tools(server)
        names = [tool.name for tool in result.tools]
        assert names == ["sample_echo", "sample_env_set", "sample_env_show", "sample_fail", "sample_nap"]
        echo = next(tool for tool in result.tools if tool.name == "sample_echo")
        assert echo.annotations is not None and echo.annotations.readOnlyHint is True


class TestCallTool:
    def test_success(self, run_sample, server) -> None:
        result = call_tool(server, "sample_echo", {"flags": {"upper": True}, "args": "hi there"})
        assert not result.isError
        assert result.structuredContent == {"stdout": "HI THERE\n", "stderr": "", "exitCode": 0}
        assert json.loads(result.content[0].text) == result.structuredContent

    def test_nonzero_exit_is_not_an_error(self, run_sample, server) -> None:
        result = call_tool(server, "sample_fail", {"flags": {"code": 5}})
        assert not result.isError
        assert result.structuredContent["exitCode"] == 5

    def test_quoted_args(self, run_sample, server) -> None:
        result = call_tool(server, "sample_echo", {"args": "'a  b' c"})
        assert result.structuredContent["stdout"] == "a  b c\n"

    def test_unknown_tool(self, server) -> None:
        result = call_tool(server, "sample_missing", {})
        assert result.isError
        assert "sample_missing" in result.content[0].text

    def test_unknown_flag_rejected(self, server) -> None:
        result = call_tool(server, "sample_echo", {"flags": {"nope": 1}})
        assert result.isError

    def test_timeout_is_error(self, run_sample, sample_cli) -> None:
        config = Config(timeout=1)
        srv = create_server(config, compile_tools(sample_cli, config), "sample")
        result = call_tool(srv, "sample_nap", {"flags": {"seconds": 10}})
        assert result.isError
        assert "timed out" in result.content[0].text

    def test_hook_result_used(self, run_sample, sample_cli) -> None:
        def post(ctx, request, payload, result, output, error):
            replacement = types.CallToolResult(content=[types.TextContent(type="text", text="custom")])
            return replacement, output, error

        config = Config(selectors=[Selector(post_run=post)], timeout=30)
        srv = create_server(config, compile_tools(sample_cli, config), "sample")
        result = call_tool(srv, "sample_echo", {"args": "x"})
        assert not result.isError
        assert result.content[0].text == "custom"
        assert result.structuredContent["stdout"] == "x\n"

    def test_call_after_panic_succeeds(self, run_sample, sample_cli) -> None:
        def pre(ctx, request, payload):
            if payload.args == "boom":
                raise RuntimeError("boom")
            return ctx, request, payload

        config = Config(selectors=[Selector(pre_run=pre)], timeout=30)
        srv = create_server(config, compile_tools(sample_cli, config), "sample")

        async def main() -> tuple[types.CallToolResult, types.CallToolResult]:
            async with create_connected_server_and_client_session(srv) as session:
                first = await session.call_tool("sample_echo", {"args": "boom"})
                second = await session.call_tool("sample_echo", {"args": "fine"})
                return first, second

        first, second = asyncio.run(main())
        assert first.isError
        assert "panic: boom" in first.content[0].text
        assert not second.isError
        assert second.structuredContent == {"stdout": "fine\n", "stderr": "", "exitCode": 0}


class TestHTTP:
    def test_app_mounts_endpoint(self, server) -> None:
        app = create_http_app(server)
        assert [route.path for route in app.routes] == [HTTP_PATH]

    @pytest.mark.parametrize("cert, key", [("cert.pem", None), (None, "key.pem")])
    def test_tls_pair_required(self, server, cert, key) -> None:
        with pytest.raises(ConfigError, match="--cert-file and --key-file"):
            asyncio.run(serve_http(server, cert_file=cert, key_file=key))
