"""Cursor (``~/.cursor/mcp.json`` or workspace ``.cursor/mcp.json``, key ``mcpServers``)."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from clibridge.config import cursor_config_path
from clibridge.editors.base import EditorConfigManager
from clibridge.models import CursorConfig, CursorServer


class CursorConfigManager(EditorConfigManager[CursorConfig]):
    label = "Cursor"
    config_model = CursorConfig
    server_model = CursorServer

    def __init__(self, path: Optional[Path] = None, workspace: bool = False) -> None:
        self.workspace = workspace
        super().__init__(path if path is not None else cursor_config_path(workspace))

    @classmethod
    def default_path(cls) -> Path:
        return cursor_config_path()
