"""Gemini CLI client.

Skills and commands are both installed as Gemini custom commands
(`commands/{name}.toml`). Hooks and MCP servers share `settings.json`.
"""

import logging
import re
from collections.abc import Mapping, Sequence
from pathlib import Path

import tomlkit

from sx.assets.installed import InstalledAssetInfo, SkillContent
from sx.assets.metadata import Metadata
from sx.assets.types import COMMAND, HOOK, MCP, SKILL, Asset, AssetType
from sx.bootstrap.native import (
    install_command_hook,
    install_query_mcp,
    run_bootstrap,
    uninstall_command_hook,
    uninstall_query_mcp,
)
from sx.bootstrap.options import (
    ANALYTICS_HOOK_KEY,
    SESSION_HOOK_KEY,
    SX_QUERY_MCP_KEY,
    BootstrapOption,
    analytics_hook_option,
    session_hook_option,
    sx_query_mcp_option,
)
from sx.clients.batch import install_batch, scan_all, uninstall_batch, verify_batch
from sx.clients.types import AssetResult, InstallRequest, UninstallRequest, VerifyResult
from sx.core.cancellation import CancelToken
from sx.core.errors import AssetValidationError
from sx.core.process import query_version
from sx.core.scope import InstallScope, ScopeLayout
from sx.handlers.base import AssetHandler
from sx.handlers.fileasset import FileAssetOps
from sx.handlers.hook import HookHandler, HookTarget, nested_hook_entry
from sx.handlers.mcp import McpHandler
from sx.handlers.prompt_file import PromptFileHandler
from sx.handlers.rules import RuleCapabilities
from sx.native_config.formats import JSON
from sx.native_config.mcp import MCP_OWNED_FIELDS, McpRegistration, encode_gemini
from sx.native_config.sections import NamedEntryTable

logger = logging.getLogger(__name__)

CLIENT_ID = "gemini"
CONFIG_DIR = ".gemini"
SETTINGS_FILE = "settings.json"

EVENT_MAP: Mapping[str, str] = {
    "session-start": "SessionStart",
    "session-end": "SessionEnd",
    "pre-tool-use": "PreToolUse",
    "post-tool-use": "AfterTool",
    "post-tool-use-failure": "AfterTool",
    "user-prompt-submit": "UserPromptSubmit",
    "stop": "Stop",
}

SESSION_HOOK_COMMAND = f"sx install --hook-mode --client={CLIENT_ID}"
ANALYTICS_HOOK_COMMAND = f"sx report-usage --client={CLIENT_ID}"

MCP_SERVERS = NamedEntryTable(("mcpServers",), MCP_OWNED_FIELDS, label="MCP server")

_RELATIVE_FILE_REF = re.compile(r"@\./([^\s)\]}]+)")
_ABSOLUTE_FILE_REF = re.compile(r"(?<![\w@{])@(/[^\s)\]}]+)")


def convert_prompt_syntax(content: str) -> str:
    """Translate sx prompt placeholders into Gemini's syntax.

    `$ARGUMENTS` becomes `{{args}}`; file references `@./path` and `@/path`
    become `@{path}` and `@{/path}`. Package-style references such as
    `@org/pkg` are left alone.
    """
    content = content.replace("$ARGUMENTS", "{{args}}")
    content = _RELATIVE_FILE_REF.sub(r"@{\1}", content)
    return _ABSOLUTE_FILE_REF.sub(r"@{\1}", content)


def render_command_toml(metadata: Metadata, content: str) -> str:
    doc = tomlkit.document()
    if metadata.asset.description:
        doc["description"] = metadata.asset.description
    prompt = convert_prompt_syntax(content).strip()
    doc["prompt"] = tomlkit.string(f"\n{prompt}\n", multiline=True)
    return tomlkit.dumps(doc)


_SKILL_COMMANDS = FileAssetOps("commands", SKILL, suffix=".toml")
_COMMANDS = FileAssetOps("commands", COMMAND, suffix=".toml")


class GeminiClient:
    def __init__(self, home: Path) -> None:
        self._home = home
        self._layout = ScopeLayout(global_base=home / CONFIG_DIR, repo_dir=CONFIG_DIR)

    @property
    def client_id(self) -> str:
        return CLIENT_ID

    @property
    def display_name(self) -> str:
        return "Gemini CLI"

    @property
    def supported_types(self) -> tuple[AssetType, ...]:
        return (SKILL, COMMAND, HOOK, MCP)

    def is_installed(self) -> bool:
        return (self._home / CONFIG_DIR).is_dir()

    def get_version(self, cancel: CancelToken) -> str | None:
        return query_version(["gemini", "--version"], cancel)

    def supports_asset_type(self, asset_type: AssetType) -> bool:
        return asset_type in self.supported_types

    def _mcp_registration(self, base: Path) -> McpRegistration:
        return McpRegistration(base / SETTINGS_FILE, JSON, MCP_SERVERS, encode_gemini)

    def _handler_for(self, asset_type: AssetType, scope: InstallScope) -> tuple[AssetHandler, Path]:
        base = self._layout.resolve(scope, asset_type)
        handler: AssetHandler
        if asset_type == SKILL:
            handler = PromptFileHandler(_SKILL_COMMANDS, render=render_command_toml)
        elif asset_type == COMMAND:
            handler = PromptFileHandler(_COMMANDS, render=render_command_toml)
        elif asset_type == HOOK:
            handler = HookHandler(
                HookTarget(
                    client_id=CLIENT_ID,
                    config_path=base / SETTINGS_FILE,
                    fmt=JSON,
                    event_map=EVENT_MAP,
                    build_entry=nested_hook_entry,
                )
            )
        elif asset_type == MCP:
            handler = McpHandler(self._mcp_registration(base), supports_remote=True)
        else:
            raise AssetValidationError(
                f"{self.display_name} does not support {asset_type.key} assets"
            )
        return handler, base

    def install_assets(self, request: InstallRequest) -> list[AssetResult]:
        return install_batch(CLIENT_ID, self.supported_types, request, self._handler_for)

    def uninstall_assets(self, request: UninstallRequest) -> list[AssetResult]:
        return uninstall_batch(CLIENT_ID, self.supported_types, request, self._handler_for)

    def list_assets(self, scope: InstallScope) -> list[InstalledAssetInfo]:
        return _SKILL_COMMANDS.scan_installed(self._layout.resolve(scope, SKILL))

    def read_skill(self, name: str, scope: InstallScope) -> SkillContent | None:
        # Skills are flattened into TOML commands; there is no skill tree to read
        return None

    def ensure_asset_support(self, scope: InstallScope) -> None:
        logger.debug("No asset support setup needed for %s", CLIENT_ID)

    def get_asset_path(self, name: str, asset_type: AssetType, scope: InstallScope) -> Path:
        handler, base = self._handler_for(asset_type, scope)
        return handler.asset_path(name, base)

    def verify_assets(self, assets: Sequence[Asset], scope: InstallScope) -> list[VerifyResult]:
        return verify_batch(self.supported_types, assets, scope, self._handler_for)

    def scan_installed_assets(self, scope: InstallScope) -> list[InstalledAssetInfo]:
        return scan_all(self.supported_types, scope, self._handler_for)

    def bootstrap_options(self) -> list[BootstrapOption]:
        return [
            session_hook_option(self.display_name, "SessionStart"),
            analytics_hook_option(self.display_name, "AfterTool"),
            sx_query_mcp_option(),
        ]

    def _settings_path(self) -> Path:
        return self._home / CONFIG_DIR / SETTINGS_FILE

    def install_bootstrap(self, options: Sequence[BootstrapOption]) -> list[AssetResult]:
        settings = self._settings_path()
        registration = self._mcp_registration(self._home / CONFIG_DIR)
        return run_bootstrap(
            CLIENT_ID,
            options,
            {
                SESSION_HOOK_KEY: lambda option: install_command_hook(
                    option.key, settings, JSON, "SessionStart", SESSION_HOOK_COMMAND, nested=True
                ),
                ANALYTICS_HOOK_KEY: lambda option: install_command_hook(
                    option.key, settings, JSON, "AfterTool", ANALYTICS_HOOK_COMMAND, nested=True
                ),
                SX_QUERY_MCP_KEY: lambda option: install_query_mcp(option, registration),
            },
        )

    def uninstall_bootstrap(self, options: Sequence[BootstrapOption]) -> list[AssetResult]:
        settings = self._settings_path()
        registration = self._mcp_registration(self._home / CONFIG_DIR)
        return run_bootstrap(
            CLIENT_ID,
            options,
            {
                SESSION_HOOK_KEY: lambda option: uninstall_command_hook(
                    option.key, settings, JSON, SESSION_HOOK_COMMAND, nested=True
                ),
                ANALYTICS_HOOK_KEY: lambda option: uninstall_command_hook(
                    option.key, settings, JSON, ANALYTICS_HOOK_COMMAND, nested=True
                ),
                SX_QUERY_MCP_KEY: lambda option: uninstall_query_mcp(option, registration),
            },
        )

    def should_install(self, hook_input: Mapping[str, object] | None) -> bool:
        return True

    def rule_capabilities(self) -> RuleCapabilities | None:
        return None
