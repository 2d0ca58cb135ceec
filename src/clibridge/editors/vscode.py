"""VS Code (user ``mcp.json`` or workspace ``.vscode/mcp.json``, key ``servers``)."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from clibridge.config import vscode_config_path
from clibridge.editors.base import EditorConfigManager
from clibridge.models import VSCodeConfig, VSCodeServer


class VSCodeConfigManager(EditorConfigManager[VSCodeConfig]):
    label = "VS Code"
    config_model = VSCodeConfig
    server_model = VSCodeServer

    def __init__(self, path: Optional[Path] = None, workspace: bool = False) -> None:
        self.workspace = workspace
        super().__init__(path if path is not None else vscode_config_path(workspace))

    @classmethod
    def default_path(cls) -> Path:
        return vscode_config_path()

    def server_entry(self, command, args, env=None) -> VSCodeServer:
        return VSCodeServer(type="stdio", command=command, args=args, env=env)
