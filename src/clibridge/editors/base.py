"""Shared load/modify/save logic for editor MCP configuration files.

Each editor keeps a JSON document with a map of named MCP servers. A
manager loads it into a pydantic model (unknown keys preserved), adds or
removes one entry, and writes it back atomically after rotating backups.
A missing file loads as an empty config and is created on first save.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, ClassVar, Generic, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from clibridge import output
from clibridge.config import _atomic_write, backup_config_file
from clibridge.exceptions import ConfigError

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT", bound=BaseModel)


class EditorConfigManager(Generic[ConfigT]):
    """Manage the MCP server entries of one editor config file.

    Subclasses set :attr:`label`, :attr:`config_model` and
    :attr:`server_model`, and implement :meth:`default_path` and
    :meth:`server_entry`.

    Args:
        path: Config file to manage. Defaults to :meth:`default_path`.
    """

    label: ClassVar[str] = "editor"
    config_model: ClassVar[type[BaseModel]]
    server_model: ClassVar[type[BaseModel]]

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else self.default_path()

    @classmethod
    def default_path(cls) -> Path:
        raise NotImplementedError

    def server_entry(
        self,
        command: str,
        args: list[str],
        env: Optional[dict[str, str]] = None,
    ) -> BaseModel:
        """Build the server entry that launches *command* with *args*."""
        return self.server_model(command=command, args=args, env=env)

    # ------------------------------------------------------------------ #
    # Load / save
    # ------------------------------------------------------------------ #

    def load(self) -> ConfigT:
        """Read the config file.

        Raises:
            ConfigError: If the file exists but is unreadable or not valid JSON.
        """
        if not self.path.exists():
            return self.config_model()  # type: ignore[return-value]
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to read {self.label} config at {self.path}: {exc}") from exc
        if not text.strip():
            return self.config_model()  # type: ignore[return-value]
        try:
            data = json.loads(text)
            return self.config_model.model_validate(data)  # type: ignore[return-value]
        except json.JSONDecodeError as exc:
            raise ConfigError(
                f"Failed to parse {self.label} config at {self.path}: invalid JSON: {exc}"
            ) from exc
        except ValidationError as exc:
            raise ConfigError(f"Invalid {self.label} config at {self.path}: {exc}") from exc

    def save(self, config: ConfigT) -> None:
        """Back up the current file, then write *config* atomically."""
        backup = backup_config_file(self.path)
        if backup is not None:
            output.info(f"Backup config file created at {backup}")
        data = config.model_dump(mode="json", by_alias=True, exclude_none=True)
        _atomic_write(self.path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
        logger.debug("Wrote %s config to %s", self.label, self.path)

    def _servers(self, config: ConfigT) -> dict[str, Any]:
        return getattr(config, type(config).servers_field)

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    def servers(self) -> dict[str, Any]:
        """Configured server entries keyed by name."""
        return dict(self._servers(self.load()))

    def has_server(self, name: str) -> bool:
        return name in self._servers(self.load())

    def enable_server(self, name: str, server: BaseModel) -> None:
        """Add or replace server *name*, warning when it already exists."""
        config = self.load()
        servers = self._servers(config)
        if name in servers:
            output.warning(f"MCP server {name!r} already exists in {self.label} config and will be overwritten")
        servers[name] = server
        self.save(config)

    def disable_server(self, name: str) -> bool:
        """Remove server *name*. Returns ``False`` (with a warning) when it is absent."""
        config = self.load()
        servers = self._servers(config)
        if name not in servers:
            output.warning(f"MCP server {name!r} does not exist in {self.label} config")
            return False
        del servers[name]
        self.save(config)
        return True
