"""Re-execute the running program for a tool call and capture its output.

:func:`invoke` is the whole per-call pipeline::

    pre_run hook -> build argv -> run child -> capture -> post_run hook

It never raises for ordinary failures. A child exiting non-zero is data in
:class:`~clibridge.models.ToolOutput`. Launch failures, timeouts and a
context cancelled by a pre-run hook come back as the third tuple element.
Anything a hook (or the pipeline itself) raises is caught at the barrier and
returned as a :class:`~clibridge.exceptions.HookPanicError`. Task
cancellation is the one exception that propagates, after the child has been
killed.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import os
import shutil
import sys
from dataclasses import dataclass, field
from typing import Any, Optional

from mcp import types

from clibridge.bridge.args import build_command_args
from clibridge.compiler.tools import CompiledTool
from clibridge.exceptions import (
    ClibridgeError,
    HookPanicError,
    InvocationTimeoutError,
    LaunchError,
)
from clibridge.models import ToolInput, ToolOutput

logger = logging.getLogger(__name__)


@dataclass
class InvocationContext:
    """Per-call state shared by the hooks and the executor.

    A pre-run hook may call :meth:`cancel` to stop the call before the child
    starts, or change :attr:`timeout`. :attr:`metadata` is free for hooks to
    pass data from pre-run to post-run.
    """

    tool_name: str
    timeout: Optional[float] = None
    cancelled: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    def cancel(self) -> None:
        self.cancelled = True


InvokeResult = tuple[Optional[types.CallToolResult], ToolOutput, Optional[ClibridgeError]]


def resolve_self_command() -> list[str]:
    """Return the argv prefix that re-runs the current program.

    ``python -m pkg`` is re-run as ``[python, -m, pkg]``. A script that is
    executable (a console-script shim) runs directly; any other script runs
    under the current interpreter.

    Raises:
        LaunchError: If the program path cannot be resolved.
    """
    main = sys.modules.get("__main__")
    spec = getattr(main, "__spec__", None)
    if spec is not None and spec.name:
        module = spec.name
        if module.endswith(".__main__"):
            module = module[: -len(".__main__")]
        return [sys.executable, "-m", module]

    argv0 = sys.argv[0] if sys.argv else ""
    if not argv0:
        raise LaunchError("Cannot determine the running program: sys.argv is empty")
    if os.sep in argv0 or (os.altsep and os.altsep in argv0):
        path: Optional[str] = os.path.abspath(argv0)
    else:
        path = shutil.which(argv0) or os.path.abspath(argv0)
    if path is None or not os.path.exists(path):
        raise LaunchError(f"Cannot resolve the running program {argv0!r}")

    if path.endswith(".py") or not os.access(path, os.X_OK):
        return [sys.executable, path]
    return [path]


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()


async def run_command(argv: list[str], timeout: Optional[float] = None) -> ToolOutput:
    """Run the current program with *argv* and capture its output.

    Raises:
        LaunchError: If the program cannot be resolved or started.
        InvocationTimeoutError: If the child runs longer than *timeout*.
    """
    command = [*resolve_self_command(), *argv]
    logger.debug("Executing %s", command)
    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise LaunchError(f"Failed to start {command[0]}: {exc}") from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        await _kill(proc)
        raise InvocationTimeoutError(f"Command timed out after {timeout:g}s") from None
    except asyncio.CancelledError:
        await _kill(proc)
        raise

    output = ToolOutput(
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
        exit_code=proc.returncode if proc.returncode is not None else -1,
    )
    logger.debug("Command exited with code %d", output.exit_code)
    return output


async def execute(
    ctx: InvocationContext,
    tool: CompiledTool,
    request: types.CallToolRequest,
    payload: ToolInput,
) -> ToolOutput:
    """Build the argv for *payload* and run it."""
    if ctx.cancelled:
        raise LaunchError("context canceled")
    argv = build_command_args(
        request.params.name, payload.flags, payload.args, tool.bindings, tool.segments
    )
    return await run_command(argv, ctx.timeout)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def _pipeline(
    ctx: InvocationContext,
    tool: CompiledTool,
    request: types.CallToolRequest,
    payload: ToolInput,
) -> InvokeResult:
    selector = tool.selector
    if selector.pre_run is not None:
        ctx, request, payload = await _resolve(selector.pre_run(ctx, request, payload))

    result: Optional[types.CallToolResult] = None
    error: Optional[ClibridgeError] = None
    try:
        output = await execute(ctx, tool, request, payload)
    except LaunchError as exc:
        output = ToolOutput()
        error = exc

    if selector.post_run is not None:
        result, output, error = await _resolve(
            selector.post_run(ctx, request, payload, result, output, error)
        )
    return result, output, error


async def invoke(
    ctx: InvocationContext,
    tool: CompiledTool,
    request: types.CallToolRequest,
    payload: ToolInput,
) -> InvokeResult:
    """Run one tool call through hooks and execution.

    Returns:
        ``(result, output, error)``. ``result`` is only set by a post-run
        hook that wants to replace the default response.
    """
    try:
        return await _pipeline(ctx, tool, request, payload)
    except Exception as exc:
        logger.exception("Tool %r failed unexpectedly", ctx.tool_name)
        return None, ToolOutput(), HookPanicError(f"panic: {exc}")
