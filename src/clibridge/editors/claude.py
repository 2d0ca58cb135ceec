"""Claude Desktop (``claude_desktop_config.json``, key ``mcpServers``)."""

from __future__ import annotations

from pathlib import Path

from clibridge.config import claude_config_path
from clibridge.editors.base import EditorConfigManager
from clibridge.models import ClaudeConfig, ClaudeServer


class ClaudeConfigManager(EditorConfigManager[ClaudeConfig]):
    label = "Claude Desktop"
    config_model = ClaudeConfig
    server_model = ClaudeServer

    @classmethod
    def default_path(cls) -> Path:
        return claude_config_path()
