"""Typed model, parsing and validation for an asset's metadata.toml.

Every asset archive carries a root-level metadata.toml:

    [asset]
    name = "code-review"
    version = "1.2.0"
    type = "skill"
    description = "Reviews diffs"

    [skill]
    prompt-file = "SKILL.md"

Older archives use [artifact] instead of [asset]; both are accepted.
"""

import re
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field

from packaging.version import InvalidVersion, Version

from sx.assets.types import (
    ALL_ASSET_TYPES,
    CLAUDE_CODE_PLUGIN,
    HOOK,
    MCP,
    RULE,
    AssetType,
    asset_type_from_key,
)
from sx.core.errors import AssetValidationError

METADATA_FILE = "metadata.toml"

_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

CANONICAL_HOOK_EVENTS: tuple[str, ...] = (
    "session-start",
    "session-end",
    "pre-tool-use",
    "post-tool-use",
    "post-tool-use-failure",
    "user-prompt-submit",
    "stop",
    "subagent-start",
    "subagent-stop",
    "pre-compact",
)

MCP_TRANSPORTS: tuple[str, ...] = ("stdio", "sse", "http")

DEFAULT_PLUGIN_MANIFEST = ".claude-plugin/plugin.json"

_DEFAULT_PROMPT_FILES = {
    "skill": "SKILL.md",
    "command": "COMMAND.md",
    "agent": "AGENT.md",
    "rule": "RULE.md",
}


@dataclass(frozen=True)
class AssetSection:
    name: str
    version: str
    asset_type: AssetType
    description: str = ""


@dataclass(frozen=True)
class PromptSection:
    """Section for skill, command and agent assets."""

    prompt_file: str


@dataclass(frozen=True)
class RuleSection:
    prompt_file: str
    title: str | None = None
    description: str | None = None
    globs: tuple[str, ...] = ()
    always_apply: bool | None = None


@dataclass(frozen=True)
class HookSection:
    """Hook declaration.

    Exactly one of script_file or command is set. client_overrides holds the
    [hook.<client-id>] tables; an "event" key in one replaces the standard
    event mapping for that client.
    """

    event: str
    script_file: str | None = None
    command: str | None = None
    args: tuple[str, ...] = ()
    matcher: str | None = None
    timeout: int | None = None
    run_async: bool = False
    fail_on_error: bool = False
    client_overrides: Mapping[str, Mapping[str, object]] = field(default_factory=dict)


@dataclass(frozen=True)
class McpSection:
    transport: str = "stdio"
    command: str | None = None
    args: tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    url: str | None = None
    timeout: int | None = None

    @property
    def is_remote(self) -> bool:
        return self.transport in ("sse", "http")


@dataclass(frozen=True)
class PluginSection:
    """[claude-code-plugin] section. Every field has a default."""

    manifest_file: str = DEFAULT_PLUGIN_MANIFEST
    marketplace: str = ""
    auto_enable: bool = True


@dataclass(frozen=True)
class Metadata:
    asset: AssetSection
    prompt: PromptSection | None = None
    rule: RuleSection | None = None
    hook: HookSection | None = None
    mcp: McpSection | None = None
    plugin: PluginSection | None = None

    @property
    def name(self) -> str:
        return self.asset.name

    @property
    def version(self) -> str:
        return self.asset.version

    @property
    def asset_type(self) -> AssetType:
        return self.asset.asset_type

    @property
    def prompt_file(self) -> str | None:
        """Prompt file declared by skill, command, agent or rule sections."""
        if self.rule is not None:
            return self.rule.prompt_file
        if self.prompt is not None:
            return self.prompt.prompt_file
        return None


def _str_field(table: Mapping[str, object], key: str, section: str) -> str | None:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise AssetValidationError(f"{section}: {key} must be a string")
    return value


def _str_list_field(table: Mapping[str, object], key: str, section: str) -> tuple[str, ...]:
    value = table.get(key)
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise AssetValidationError(f"{section}: {key} must be an array of strings")
    return tuple(value)


def _int_field(table: Mapping[str, object], key: str, section: str) -> int | None:
    value = table.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise AssetValidationError(f"{section}: {key} must be an integer")
    return value


def _table(data: Mapping[str, object], key: str) -> Mapping[str, object] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise AssetValidationError(f"[{key}] must be a table")
    return value


def _parse_hook(table: Mapping[str, object]) -> HookSection:
    overrides: dict[str, Mapping[str, object]] = {}
    for key, value in table.items():
        if isinstance(value, dict):
            overrides[key] = dict(value)

    run_async = table.get("async", False)
    fail_on_error = table.get("fail-on-error", False)
    if not isinstance(run_async, bool) or not isinstance(fail_on_error, bool):
        raise AssetValidationError("hook: async and fail-on-error must be booleans")

    return HookSection(
        event=_str_field(table, "event", "hook") or "",
        script_file=_str_field(table, "script-file", "hook"),
        command=_str_field(table, "command", "hook"),
        args=_str_list_field(table, "args", "hook"),
        matcher=_str_field(table, "matcher", "hook"),
        timeout=_int_field(table, "timeout", "hook"),
        run_async=run_async,
        fail_on_error=fail_on_error,
        client_overrides=overrides,
    )


def _parse_mcp(table: Mapping[str, object]) -> McpSection:
    env = table.get("env", {})
    if not isinstance(env, dict) or not all(isinstance(v, str) for v in env.values()):
        raise AssetValidationError("mcp: env must be a table of strings")
    return McpSection(
        transport=_str_field(table, "transport", "mcp") or "stdio",
        command=_str_field(table, "command", "mcp"),
        args=_str_list_field(table, "args", "mcp"),
        env=dict(env),
        url=_str_field(table, "url", "mcp"),
        timeout=_int_field(table, "timeout", "mcp"),
    )


def _parse_plugin(table: Mapping[str, object]) -> PluginSection:
    section = CLAUDE_CODE_PLUGIN.key
    auto_enable = _optional_bool(table, "auto-enable", section)
    return PluginSection(
        manifest_file=_str_field(table, "manifest-file", section) or DEFAULT_PLUGIN_MANIFEST,
        marketplace=_str_field(table, "marketplace", section) or "",
        auto_enable=True if auto_enable is None else auto_enable,
    )


def parse_metadata(content: str | bytes) -> Metadata:
    """Parse and validate metadata.toml content.

    Raises:
        AssetValidationError: If the content is not valid TOML, lacks required
            sections, or fails validation
    """
    try:
        text = content.decode("utf-8") if isinstance(content, bytes) else content
        data = tomllib.loads(text)
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise AssetValidationError(f"failed to parse {METADATA_FILE}: {e}") from e

    asset_table = _table(data, "asset")
    if asset_table is None:
        asset_table = _table(data, "artifact")
    if asset_table is None:
        raise AssetValidationError("[asset] section is required")

    type_key = _str_field(asset_table, "type", "asset") or ""
    asset_type = asset_type_from_key(type_key)
    if asset_type is None:
        raise AssetValidationError(
            f"asset: invalid asset type: {type_key!r} "
            f"(must be one of: {', '.join(t.key for t in ALL_ASSET_TYPES)})"
        )

    asset = AssetSection(
        name=_str_field(asset_table, "name", "asset") or "",
        version=_str_field(asset_table, "version", "asset") or "",
        asset_type=asset_type,
        description=_str_field(asset_table, "description", "asset") or "",
    )

    section = _table(data, asset_type.key)
    metadata = Metadata(asset=asset)
    if asset_type == HOOK:
        if section is None:
            raise AssetValidationError("[hook] section is required for hook assets")
        metadata = Metadata(asset=asset, hook=_parse_hook(section))
    elif asset_type == MCP:
        if section is None:
            raise AssetValidationError("[mcp] section is required for mcp assets")
        metadata = Metadata(asset=asset, mcp=_parse_mcp(section))
    elif asset_type == CLAUDE_CODE_PLUGIN:
        metadata = Metadata(asset=asset, plugin=_parse_plugin(section or {}))
    elif asset_type == RULE:
        table = section or {}
        metadata = Metadata(
            asset=asset,
            rule=RuleSection(
                prompt_file=_str_field(table, "prompt-file", "rule") or "RULE.md",
                title=_str_field(table, "title", "rule"),
                description=_str_field(table, "description", "rule"),
                globs=_str_list_field(table, "globs", "rule"),
                always_apply=_optional_bool(table, "always-apply"),
            ),
        )
    else:
        table = section or {}
        prompt_file = _str_field(table, "prompt-file", asset_type.key)
        metadata = Metadata(
            asset=asset,
            prompt=PromptSection(prompt_file=prompt_file or _DEFAULT_PROMPT_FILES[asset_type.key]),
        )

    validate_metadata(metadata)
    return metadata


def _optional_bool(table: Mapping[str, object], key: str, section: str = "rule") -> bool | None:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise AssetValidationError(f"{section}: {key} must be a boolean")
    return value


def validate_metadata(metadata: Metadata) -> None:
    """Check a parsed Metadata against the asset rules.

    Raises:
        AssetValidationError: With the first violation found
    """
    asset = metadata.asset
    if not asset.name:
        raise AssetValidationError("asset: name is required")
    if _NAME_PATTERN.match(asset.name) is None:
        raise AssetValidationError(
            "asset: name must contain only alphanumeric characters, dashes, and underscores"
        )
    if not asset.version:
        raise AssetValidationError("asset: version is required")
    try:
        Version(asset.version)
    except InvalidVersion as e:
        raise AssetValidationError(
            f"asset: invalid semantic version {asset.version!r}"
        ) from e

    if metadata.hook is not None:
        _validate_hook(metadata.hook)
    if metadata.mcp is not None:
        _validate_mcp(metadata.mcp)


def _validate_hook(hook: HookSection) -> None:
    if not hook.event:
        raise AssetValidationError("hook: event is required")
    if hook.event not in CANONICAL_HOOK_EVENTS:
        raise AssetValidationError(
            f"hook: invalid hook event: {hook.event} "
            f"(must be one of: {', '.join(CANONICAL_HOOK_EVENTS)})"
        )
    if hook.script_file is None and hook.command is None:
        raise AssetValidationError("hook: either script-file or command is required")
    if hook.script_file is not None and hook.command is not None:
        raise AssetValidationError("hook: script-file and command are mutually exclusive")
    if hook.timeout is not None and hook.timeout < 0:
        raise AssetValidationError("hook: timeout must be non-negative")


def _validate_mcp(mcp: McpSection) -> None:
    if mcp.transport not in MCP_TRANSPORTS:
        raise AssetValidationError(
            f"mcp: invalid transport {mcp.transport!r} (must be one of: stdio, sse, http)"
        )
    if mcp.transport == "stdio":
        if not mcp.command:
            raise AssetValidationError("mcp: command is required for stdio transport")
        if not mcp.args:
            raise AssetValidationError(
                "mcp: args is required for stdio transport (must be a non-empty array)"
            )
    else:
        if not mcp.url:
            raise AssetValidationError(f"mcp: url is required for {mcp.transport} transport")
        if mcp.command:
            raise AssetValidationError(f"mcp: command is not allowed for {mcp.transport} transport")
        if mcp.args:
            raise AssetValidationError(f"mcp: args is not allowed for {mcp.transport} transport")
    if mcp.timeout is not None and mcp.timeout < 0:
        raise AssetValidationError("mcp: timeout must be non-negative")
