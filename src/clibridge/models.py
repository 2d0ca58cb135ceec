"""Canonical Pydantic models shared across all clibridge modules.

The models fall into three groups:

**Command-tree models** -- the normalized, read-only view of one command-line
flag produced by :mod:`clibridge.tree` and consumed by the schema synthesizer:
    :class:`FlagType` and :class:`FlagDescriptor`.

**Wire models** -- the payload an agent sends to a tool and the captured
result it receives back:
    :class:`ToolInput` and :class:`ToolOutput`. Their JSON schemas also seed
    the :class:`~clibridge.schema.SchemaTemplates` registry.

**Editor configuration models** -- the JSON documents of the editors that can
launch this program as an MCP server:
    :class:`ClaudeConfig`, :class:`VSCodeConfig`, and :class:`CursorConfig`
    with their server entries. They use ``extra="allow"`` so that keys this
    package does not manage survive a load/save round trip.
"""

from __future__ import annotations

import enum
import shlex
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Flag descriptors ---


class FlagType(str, enum.Enum):
    """Type tags understood by the schema synthesizer.

    Tags not listed here are treated as freeform "other" labels and fall back
    to a string schema.
    """

    BOOL = "bool"
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    COUNT = "count"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"
    STRING_SLICE = "stringSlice"
    STRING_ARRAY = "stringArray"
    INT_SLICE = "intSlice"
    INT32_SLICE = "int32Slice"
    INT64_SLICE = "int64Slice"
    UINT_SLICE = "uintSlice"
    FLOAT32_SLICE = "float32Slice"
    FLOAT64_SLICE = "float64Slice"
    BOOL_SLICE = "boolSlice"
    STRING_TO_STRING = "stringToString"
    STRING_TO_INT = "stringToInt"
    STRING_TO_INT64 = "stringToInt64"
    DURATION = "duration"
    IP = "ip"
    IP_MASK = "ipMask"
    IP_NET = "ipNet"
    BYTES_HEX = "bytesHex"
    BYTES_BASE64 = "bytesBase64"


KNOWN_FLAG_TYPES = frozenset(tag.value for tag in FlagType)


class FlagDescriptor(BaseModel):
    """Normalized description of one command-line flag.

    ``type`` is either a :class:`FlagType` value or a freeform label for flag
    types the synthesizer does not know. ``default`` is the flag's default
    rendered as a raw string (``""`` when there is none), using ``[a,b]`` for
    lists and ``[k=v,...]`` for maps.

    ``depth`` is set only for inherited flags and names the position in the
    command path (``0`` for the root) of the group that declares the flag.
    """

    name: str
    type: str = FlagType.STRING.value
    usage: str = ""
    default: str = ""
    hidden: bool = False
    deprecated: bool = False
    required: bool = False
    schema_override: Optional[dict[str, Any]] = None
    choices: Optional[list[str]] = None
    depth: Optional[int] = None

    @property
    def is_known_type(self) -> bool:
        """Whether :attr:`type` is one of the :class:`FlagType` tags."""
        return self.type in KNOWN_FLAG_TYPES


# --- Wire models ---


class ToolInput(BaseModel):
    """Invocation payload accepted by every generated tool.

    ``args`` is the free-form positional text. A list is also accepted and
    joined with shell quoting so that each element survives tokenization.
    """

    flags: dict[str, Any] = Field(
        default_factory=dict,
        description="Flag values keyed by flag name",
    )
    args: str = Field(
        default="",
        description="Positional command line arguments",
    )

    @field_validator("args", mode="before")
    @classmethod
    def _join_arg_list(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return shlex.join(str(item) for item in value)
        if value is None:
            return ""
        return value


class ToolOutput(BaseModel):
    """Captured result of one command execution.

    A non-zero ``exit_code`` is data, not an error. Serialize with
    ``model_dump(by_alias=True)`` to get the ``exitCode`` wire key.
    """

    model_config = ConfigDict(populate_by_name=True)

    stdout: str = Field(default="", description="Standard output of the command")
    stderr: str = Field(default="", description="Standard error of the command")
    exit_code: int = Field(
        default=0,
        alias="exitCode",
        description="Exit code of the command",
    )


# --- Editor configuration ---


class ClaudeServer(BaseModel):
    """One ``mcpServers`` entry in the Claude Desktop configuration."""

    model_config = ConfigDict(extra="allow")

    command: str
    args: list[str] = Field(default_factory=list)
    env: Optional[dict[str, str]] = None


class ClaudeConfig(BaseModel):
    """Claude Desktop ``claude_desktop_config.json``."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    servers_field: ClassVar[str] = "mcp_servers"

    mcp_servers: dict[str, ClaudeServer] = Field(
        default_factory=dict, alias="mcpServers"
    )


class VSCodeInput(BaseModel):
    """One ``inputs`` entry (a prompted variable) in a VS Code MCP config."""

    model_config = ConfigDict(extra="allow")

    type: str = "promptString"
    id: str
    description: str = ""
    password: Optional[bool] = None


class VSCodeServer(BaseModel):
    """One ``servers`` entry in a VS Code MCP config."""

    model_config = ConfigDict(extra="allow")

    type: str = "stdio"
    command: Optional[str] = None
    args: Optional[list[str]] = None
    env: Optional[dict[str, str]] = None
    url: Optional[str] = None
    headers: Optional[dict[str, str]] = None


class VSCodeConfig(BaseModel):
    """VS Code ``mcp.json`` (user profile or ``.vscode/mcp.json``)."""

    model_config = ConfigDict(extra="allow")

    servers_field: ClassVar[str] = "servers"

    inputs: Optional[list[VSCodeInput]] = None
    servers: dict[str, VSCodeServer] = Field(default_factory=dict)


class CursorServer(BaseModel):
    """One ``mcpServers`` entry in a Cursor MCP config."""

    model_config = ConfigDict(extra="allow")

    command: Optional[str] = None
    args: Optional[list[str]] = None
    env: Optional[dict[str, str]] = None
    url: Optional[str] = None


class CursorConfig(BaseModel):
    """Cursor ``mcp.json`` (``~/.cursor/mcp.json`` or ``.cursor/mcp.json``)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    servers_field: ClassVar[str] = "mcp_servers"

    mcp_servers: dict[str, CursorServer] = Field(
        default_factory=dict, alias="mcpServers"
    )
