"""Invocation bridge: payload -> argv -> child process -> captured output.

* :mod:`~clibridge.bridge.args` -- argv reconstruction and tokenizing.
* :mod:`~clibridge.bridge.execute` -- self re-execution, hooks, and the
  error barrier.
"""

from clibridge.bridge.args import build_command_args, format_flag_value, split_args
from clibridge.bridge.execute import (
    InvocationContext,
    invoke,
    resolve_self_command,
    run_command,
)

__all__ = [
    "InvocationContext",
    "build_command_args",
    "format_flag_value",
    "invoke",
    "resolve_self_command",
    "run_command",
    "split_args",
]
