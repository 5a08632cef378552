"""Claude Code client.

Assets live under `~/.claude` (global) or `.claude/` in the repository or
sub-path. Hooks and enabled plugins are registered in `settings.json`; MCP
servers in `~/.claude.json` (global) or the repository's `.mcp.json`.
"""

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from sx.assets.installed import InstalledAssetInfo, SkillContent
from sx.assets.types import (
    AGENT,
    CLAUDE_CODE_PLUGIN,
    COMMAND,
    HOOK,
    MCP,
    RULE,
    SKILL,
    Asset,
    AssetType,
)
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
from sx.core.frontmatter import render_markdown_frontmatter
from sx.core.process import query_version
from sx.core.scope import InstallScope, ScopeLayout, require_repo_root
from sx.handlers.base import AssetHandler
from sx.handlers.dirasset import DirectoryAssetOps
from sx.handlers.fileasset import FileAssetOps
from sx.handlers.hook import HookHandler, HookTarget, nested_hook_entry
from sx.handlers.mcp import McpHandler
from sx.handlers.plugin import PluginHandler
from sx.handlers.prompt_file import PromptFileHandler, rule_renderer
from sx.handlers.rules import (
    ParsedRule,
    RuleCapabilities,
    RuleDefinition,
    parse_rule_with_keys,
    with_title,
)
from sx.handlers.skill import SkillHandler
from sx.native_config.formats import JSON
from sx.native_config.mcp import MCP_OWNED_FIELDS, McpRegistration, encode_type_field
from sx.native_config.sections import NamedEntryTable

logger = logging.getLogger(__name__)

CLIENT_ID = "claude-code"
CONFIG_DIR = ".claude"
SETTINGS_FILE = "settings.json"

EVENT_MAP: Mapping[str, str] = {
    "session-start": "SessionStart",
    "session-end": "SessionEnd",
    "pre-tool-use": "PreToolUse",
    "post-tool-use": "PostToolUse",
    "post-tool-use-failure": "PostToolUseFailure",
    "user-prompt-submit": "UserPromptSubmit",
    "stop": "Stop",
    "subagent-start": "SubagentStart",
    "subagent-stop": "SubagentStop",
    "pre-compact": "PreCompact",
}

SESSION_HOOK_COMMAND = f"sx install --hook-mode --client={CLIENT_ID}"
ANALYTICS_HOOK_COMMAND = f"sx report-usage --client={CLIENT_ID}"
ANALYTICS_HOOK_MATCHER = "Skill|Task|SlashCommand|mcp__.*"

MCP_SERVERS = NamedEntryTable(("mcpServers",), MCP_OWNED_FIELDS, label="MCP server")


def _generate_rule(rule: RuleDefinition) -> str:
    fields: dict[str, object] = {}
    if rule.description:
        fields["description"] = rule.description
    if rule.globs:
        fields["paths"] = list(rule.globs)
    return render_markdown_frontmatter(fields, with_title(rule))


def _parse_rule(content: str) -> ParsedRule:
    return parse_rule_with_keys(CLIENT_ID, content, globs_key="paths")


RULE_CAPABILITIES = RuleCapabilities(
    client_name=CLIENT_ID,
    rules_directory=".claude/rules",
    file_extension=".md",
    instruction_files=("CLAUDE.md", "AGENTS.md"),
    generate_rule_file=_generate_rule,
    parse_rule_file=_parse_rule,
)

_SKILLS = DirectoryAssetOps("skills", SKILL)
_COMMANDS = FileAssetOps("commands", COMMAND)
_AGENTS = FileAssetOps("agents", AGENT)
_RULES = FileAssetOps("rules", RULE, suffix=RULE_CAPABILITIES.file_extension)


class ClaudeCodeClient:
    def __init__(self, home: Path) -> None:
        self._home = home
        self._layout = ScopeLayout(global_base=home / CONFIG_DIR, repo_dir=CONFIG_DIR)

    @property
    def client_id(self) -> str:
        return CLIENT_ID

    @property
    def display_name(self) -> str:
        return "Claude Code"

    @property
    def supported_types(self) -> tuple[AssetType, ...]:
        return (SKILL, COMMAND, AGENT, RULE, HOOK, MCP, CLAUDE_CODE_PLUGIN)

    def is_installed(self) -> bool:
        return (self._home / CONFIG_DIR).is_dir()

    def get_version(self, cancel: CancelToken) -> str | None:
        return query_version(["claude", "--version"], cancel)

    def supports_asset_type(self, asset_type: AssetType) -> bool:
        return asset_type in self.supported_types

    def _mcp_registration(self, scope: InstallScope) -> McpRegistration:
        if scope.scope_type == "global":
            config_path = self._home / ".claude.json"
        else:
            config_path = require_repo_root(scope) / ".mcp.json"
        return McpRegistration(config_path, JSON, MCP_SERVERS, encode_type_field)

    def _handler_for(self, asset_type: AssetType, scope: InstallScope) -> tuple[AssetHandler, Path]:
        base = self._layout.resolve(scope, asset_type)
        handler: AssetHandler
        if asset_type == SKILL:
            handler = SkillHandler(_SKILLS)
        elif asset_type == COMMAND:
            handler = PromptFileHandler(_COMMANDS)
        elif asset_type == AGENT:
            handler = PromptFileHandler(_AGENTS)
        elif asset_type == RULE:
            handler = PromptFileHandler(_RULES, render=rule_renderer(RULE_CAPABILITIES))
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
            handler = McpHandler(self._mcp_registration(scope), supports_remote=True)
        elif asset_type == CLAUDE_CODE_PLUGIN:
            handler = PluginHandler(base / SETTINGS_FILE)
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
        return _SKILLS.scan_installed(self._layout.resolve(scope, SKILL))

    def read_skill(self, name: str, scope: InstallScope) -> SkillContent | None:
        return _SKILLS.read_prompt_content(self._layout.resolve(scope, SKILL), name)

    def ensure_asset_support(self, scope: InstallScope) -> None:
        # Claude Code discovers skills, commands and agents natively
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
            analytics_hook_option(self.display_name, "PostToolUse"),
            sx_query_mcp_option(),
        ]

    def _settings_path(self) -> Path:
        return self._home / CONFIG_DIR / SETTINGS_FILE

    def install_bootstrap(self, options: Sequence[BootstrapOption]) -> list[AssetResult]:
        settings = self._settings_path()
        registration = self._mcp_registration(InstallScope.global_scope())
        return run_bootstrap(
            CLIENT_ID,
            options,
            {
                SESSION_HOOK_KEY: lambda option: install_command_hook(
                    option.key, settings, JSON, "SessionStart", SESSION_HOOK_COMMAND, nested=True
                ),
                ANALYTICS_HOOK_KEY: lambda option: install_command_hook(
                    option.key,
                    settings,
                    JSON,
                    "PostToolUse",
                    ANALYTICS_HOOK_COMMAND,
                    nested=True,
                    matcher=ANALYTICS_HOOK_MATCHER,
                ),
                SX_QUERY_MCP_KEY: lambda option: install_query_mcp(option, registration),
            },
        )

    def uninstall_bootstrap(self, options: Sequence[BootstrapOption]) -> list[AssetResult]:
        settings = self._settings_path()
        registration = self._mcp_registration(InstallScope.global_scope())
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
        return RULE_CAPABILITIES
