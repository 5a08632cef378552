"""MCP server entries and where each client registers them."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from sx.native_config.engine import add_or_update, read_config, remove_entry, verify_present
from sx.native_config.formats import ConfigFormat
from sx.native_config.sections import ManagedEntry, ManagedSection
from sx.native_config.values import ConfigValue, as_str, as_str_list, as_str_map


@dataclass(frozen=True)
class MCPServerEntry:
    """A server registration; identity is `name`."""

    name: str
    transport: str = "stdio"
    command: str | None = None
    args: tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    url: str | None = None

    @property
    def is_remote(self) -> bool:
        return self.transport in ("sse", "http")

    @staticmethod
    def from_fields(name: str, fields: Mapping[str, object]) -> "MCPServerEntry":
        """Decode an entry from any of the supported dialects."""
        transport = as_str(fields.get("transport")) or as_str(fields.get("type"))
        url = as_str(fields.get("url"))
        http_url = as_str(fields.get("httpUrl"))
        if http_url is not None:
            url = http_url
            transport = transport or "http"
        if transport is None:
            transport = "sse" if url is not None else "stdio"
        return MCPServerEntry(
            name=name,
            transport=transport,
            command=as_str(fields.get("command")),
            args=tuple(as_str_list(fields.get("args")) or ()),
            env=as_str_map(fields.get("env")) or {},
            url=url,
        )


MCP_OWNED_FIELDS = frozenset({"transport", "type", "command", "args", "env", "url", "httpUrl"})

McpEncoder = Callable[[MCPServerEntry], dict[str, ConfigValue]]


def _launch_fields(entry: MCPServerEntry) -> dict[str, ConfigValue]:
    fields: dict[str, ConfigValue] = {}
    if entry.command:
        fields["command"] = entry.command
    if entry.args:
        fields["args"] = list(entry.args)
    if entry.env:
        fields["env"] = dict(entry.env)
    return fields


def encode_transport_field(entry: MCPServerEntry) -> dict[str, ConfigValue]:
    """`transport` plus launch fields or url (Codex `[[mcp]]`)."""
    fields: dict[str, ConfigValue] = {"transport": entry.transport}
    if entry.is_remote:
        fields["url"] = entry.url
        if entry.env:
            fields["env"] = dict(entry.env)
        return fields
    fields.update(_launch_fields(entry))
    return fields


def encode_type_field(entry: MCPServerEntry) -> dict[str, ConfigValue]:
    """`type` plus launch fields or url (Claude Code, VS Code)."""
    if entry.is_remote:
        return {"type": entry.transport, "url": entry.url}
    fields: dict[str, ConfigValue] = {"type": "stdio"}
    fields.update(_launch_fields(entry))
    return fields


def encode_plain(entry: MCPServerEntry) -> dict[str, ConfigValue]:
    """Launch fields only, or `url` for remote servers (Cursor)."""
    if entry.is_remote:
        return {"url": entry.url}
    return _launch_fields(entry)


def encode_gemini(entry: MCPServerEntry) -> dict[str, ConfigValue]:
    """Gemini uses `httpUrl` for streamable HTTP and `url` for SSE."""
    if entry.transport == "http":
        return {"httpUrl": entry.url}
    if entry.transport == "sse":
        return {"url": entry.url}
    return _launch_fields(entry)


@dataclass(frozen=True)
class McpRegistration:
    """A client's MCP registration point: file, format, section and dialect."""

    config_path: Path
    fmt: ConfigFormat
    section: ManagedSection
    encode: McpEncoder

    def register(self, entry: MCPServerEntry) -> None:
        add_or_update(
            self.config_path,
            self.fmt,
            self.section,
            ManagedEntry(key=entry.name, fields=self.encode(entry)),
        )

    def unregister(self, name: str) -> bool:
        return remove_entry(self.config_path, self.fmt, self.section, name)

    def verify(self, name: str) -> tuple[bool, str]:
        return verify_present(self.config_path, self.fmt, self.section, name)

    def servers(self) -> list[MCPServerEntry]:
        document = read_config(self.config_path, self.fmt, self.section)
        return [
            MCPServerEntry.from_fields(str(entry.key), entry.fields) for entry in document.known
        ]
