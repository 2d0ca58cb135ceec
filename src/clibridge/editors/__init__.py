"""Register this program as an MCP server in editor configuration files.

Supported editors: Claude Desktop, VS Code and Cursor. Each manager can
enable (add or overwrite), disable (remove) and list server entries.
"""

from clibridge.editors.base import EditorConfigManager
from clibridge.editors.claude import ClaudeConfigManager
from clibridge.editors.cursor import CursorConfigManager
from clibridge.editors.vscode import VSCodeConfigManager

EDITORS: dict[str, type[EditorConfigManager]] = {
    "claude": ClaudeConfigManager,
    "vscode": VSCodeConfigManager,
    "cursor": CursorConfigManager,
}

__all__ = [
    "EDITORS",
    "ClaudeConfigManager",
    "CursorConfigManager",
    "EditorConfigManager",
    "VSCodeConfigManager",
]
