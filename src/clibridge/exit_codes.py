"""Numeric process exit codes used by the ``mcp`` sub-commands.

Each constant maps to an error category and is referenced by the
corresponding :class:`~clibridge.exceptions.ClibridgeError` subclass.
Shell wrappers and editor launchers can inspect the code to tell a bad
registration apart from a failed tool launch without parsing stderr.
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including unreadable editor configs)."""

EXIT_INVALID_USAGE = 2
"""An unknown tool was requested or the invocation payload was malformed."""

EXIT_LAUNCH_ERROR = 6
"""The running program could not be re-executed, timed out, or was cancelled."""

EXIT_HOOK_PANIC = 10
"""A pre/post hook or the invocation pipeline raised unexpectedly."""
