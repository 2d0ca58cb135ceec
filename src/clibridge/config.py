"""Runtime configuration, editor config locations, and safe file writes.

This module holds everything clibridge persists or is configured with:

* **Runtime config** -- :class:`Config`, handed to
  :func:`~clibridge.compiler.compile_tools` and the ``mcp`` sub-commands.
  It carries the selector chain, the tool-name prefix, server identity, the
  log level and the per-call timeout.
* **Editor config paths** -- where Claude Desktop, VS Code and Cursor keep
  their MCP server registrations on Linux, macOS and Windows. See
  :func:`claude_config_path`, :func:`vscode_config_path`,
  :func:`cursor_config_path`.
* **File safety** -- editor configs are written with :func:`_atomic_write`
  (temp file + ``os.replace``) after :func:`backup_config_file` has rotated
  up to :data:`MAX_BACKUPS` previous copies.
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from clibridge.compiler.selectors import Selector
from clibridge.exceptions import ConfigError

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"
MAX_BACKUPS = 5

_CLAUDE_DIR = "Claude"
_CLAUDE_FILENAME = "claude_desktop_config.json"
_MCP_FILENAME = "mcp.json"


# --- Runtime config ---


@dataclass
class Config:
    """Configuration for tool compilation and serving.

    Attributes:
        selectors: Ordered selector chain. Empty means one catch-all
            :class:`~clibridge.compiler.selectors.Selector`.
        tool_name_prefix: Replaces the root command name at the start of
            every tool name. Must not contain ``_``.
        server_name: MCP server name. Defaults to the root command name.
        server_version: MCP server version string.
        instructions: Optional instructions sent to the client on initialize.
        log_level: ``debug``, ``info``, ``warn`` or ``error``.
        timeout: Seconds a tool invocation may run before it is killed.
            ``None`` disables the limit.
    """

    selectors: list[Selector] = field(default_factory=list)
    tool_name_prefix: Optional[str] = None
    server_name: Optional[str] = None
    server_version: Optional[str] = None
    instructions: Optional[str] = None
    log_level: str = "info"
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if self.tool_name_prefix is not None:
            if not self.tool_name_prefix or "_" in self.tool_name_prefix:
                raise ConfigError(
                    f"Invalid tool name prefix {self.tool_name_prefix!r}: "
                    "must be non-empty and must not contain '_'"
                )
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError(f"Invalid timeout {self.timeout!r}: must be positive")

    def effective_selectors(self) -> list[Selector]:
        return list(self.selectors) or [Selector()]


# --- Editor config paths ---


def _user_config_base() -> Path:
    """Per-user application config directory for the current platform."""
    system = platform.system()
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support"
    if system == "Windows":
        appdata = os.environ.get("APPDATA", "")
        return Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    return Path(xdg) if xdg else Path.home() / ".config"


def claude_config_path() -> Path:
    """Path of ``claude_desktop_config.json``."""
    return _user_config_base() / _CLAUDE_DIR / _CLAUDE_FILENAME


def vscode_config_path(workspace: bool = False) -> Path:
    """Path of the VS Code MCP config, user profile or ``.vscode/mcp.json``."""
    if workspace:
        return Path.cwd() / ".vscode" / _MCP_FILENAME
    return _user_config_base() / "Code" / "User" / _MCP_FILENAME


def cursor_config_path(workspace: bool = False) -> Path:
    """Path of the Cursor MCP config, ``~/.cursor/mcp.json`` or ``.cursor/mcp.json``."""
    if workspace:
        return Path.cwd() / ".cursor" / _MCP_FILENAME
    return Path.home() / ".cursor" / _MCP_FILENAME


# --- File safety ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def backup_path(path: Path, index: int = 0) -> Path:
    """Path of backup number *index* (``0`` is the most recent, ``.backup``)."""
    suffix = BACKUP_SUFFIX if index == 0 else f"{BACKUP_SUFFIX}.{index}"
    return path.with_name(path.name + suffix)


def backup_config_file(path: Path) -> Optional[Path]:
    """Copy *path* to ``<path>.backup``, shifting older backups along.

    At most :data:`MAX_BACKUPS` copies are kept (``.backup`` plus
    ``.backup.1`` to ``.backup.4``). Returns the new backup path, or
    ``None`` when *path* does not exist.

    Raises:
        ConfigError: If a backup cannot be rotated or written.
    """
    if not path.exists():
        return None
    try:
        oldest = backup_path(path, MAX_BACKUPS - 1)
        if oldest.exists():
            oldest.unlink()
        for index in range(MAX_BACKUPS - 2, -1, -1):
            current = backup_path(path, index)
            if current.exists():
                current.rename(backup_path(path, index + 1))
        target = backup_path(path)
        shutil.copy2(path, target)
    except OSError as exc:
        raise ConfigError(f"Failed to back up {path}: {exc}") from exc
    logger.info("Backed up %s to %s", path, target)
    return target
