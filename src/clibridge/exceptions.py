"""Exception hierarchy for clibridge.

All exceptions inherit from :class:`ClibridgeError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`clibridge.exit_codes`.
The ``mcp`` sub-commands catch ``ClibridgeError`` and exit with that code.
Inside the server, invocation errors are returned as values by
:func:`clibridge.bridge.invoke` and surfaced to the agent as tool errors.

Subclass hierarchy::

    ClibridgeError (exit 1)
    +-- InvalidUsageError       (exit 2)
    +-- ConfigError             (exit 1)
    +-- LaunchError             (exit 6)
    |   +-- InvocationTimeoutError (exit 6)
    +-- HookPanicError          (exit 10)
"""

from clibridge.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_HOOK_PANIC,
    EXIT_INVALID_USAGE,
    EXIT_LAUNCH_ERROR,
)


class ClibridgeError(Exception):
    """Base exception for all clibridge errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ClibridgeError):
    """Raised for unknown tool names or payloads that fail validation."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(ClibridgeError):
    """Raised for configuration problems (bad tool prefix, unreadable editor config)."""

    exit_code = EXIT_GENERIC_FAILURE


class LaunchError(ClibridgeError):
    """Raised when the running program cannot be re-executed.

    Covers an unresolvable executable, a spawn failure, and a context that
    was cancelled before the child started.
    """

    exit_code = EXIT_LAUNCH_ERROR


class InvocationTimeoutError(LaunchError):
    """Raised when a child process outlives the invocation timeout and is killed."""


class HookPanicError(ClibridgeError):
    """Raised when a hook or the invocation pipeline fails unexpectedly.

    The message always starts with ``panic:``.
    """

    exit_code = EXIT_HOOK_PANIC
