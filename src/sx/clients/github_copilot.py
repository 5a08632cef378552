"""GitHub Copilot client.

Global assets live in `~/.copilot`; repository assets in `.github/` using
Copilot's file naming (`*.instructions.md`, `*.prompt.md`, `*.agent.md`).
MCP servers are registered for VS Code in `.vscode/mcp.json` under `servers`.
"""

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from sx.assets.installed import InstalledAssetInfo, SkillContent
from sx.assets.types import AGENT, COMMAND, MCP, RULE, SKILL, Asset, AssetType
from sx.bootstrap.native import install_query_mcp, run_bootstrap, uninstall_query_mcp
from sx.bootstrap.options import SX_QUERY_MCP_KEY, BootstrapOption, sx_query_mcp_option
from sx.clients.batch import install_batch, scan_all, uninstall_batch, verify_batch
from sx.clients.types import AssetResult, InstallRequest, UninstallRequest, VerifyResult
from sx.core.cancellation import CancelToken
from sx.core.errors import AssetValidationError
from sx.core.frontmatter import render_markdown_frontmatter
from sx.core.process import query_version
from sx.core.scope import InstallScope, ScopeLayout
from sx.handlers.base import AssetHandler
from sx.handlers.dirasset import DirectoryAssetOps
from sx.handlers.fileasset import FileAssetOps
from sx.handlers.mcp import McpHandler
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

CLIENT_ID = "github-copilot"
GLOBAL_DIR = ".copilot"
REPO_DIR = ".github"
VSCODE_DIR = ".vscode"
MCP_FILE = "mcp.json"

MCP_SERVERS = NamedEntryTable(("servers",), MCP_OWNED_FIELDS, label="MCP server")


def _generate_rule(rule: RuleDefinition) -> str:
    fields: dict[str, object] = {}
    if rule.globs:
        fields["applyTo"] = ",".join(rule.globs)
    if rule.description:
        fields["description"] = rule.description
    return render_markdown_frontmatter(fields, with_title(rule))


def _parse_rule(content: str) -> ParsedRule:
    return parse_rule_with_keys(CLIENT_ID, content, globs_key="applyTo")


RULE_CAPABILITIES = RuleCapabilities(
    client_name=CLIENT_ID,
    rules_directory=".github/instructions",
    file_extension=".instructions.md",
    # copilot-instructions.md is read by Copilot but not managed by sx
    instruction_files=(),
    generate_rule_file=_generate_rule,
    parse_rule_file=_parse_rule,
)

_SKILLS = DirectoryAssetOps("skills", SKILL)
_INSTRUCTIONS = FileAssetOps("instructions", RULE, suffix=RULE_CAPABILITIES.file_extension)
_PROMPTS = FileAssetOps("prompts", COMMAND, suffix=".prompt.md")
_AGENTS = FileAssetOps("agents", AGENT, suffix=".agent.md")


class GitHubCopilotClient:
    def __init__(self, home: Path) -> None:
        self._home = home
        self._layout = ScopeLayout(global_base=home / GLOBAL_DIR, repo_dir=REPO_DIR)
        # VS Code reads MCP servers from the workspace root only
        self._mcp_layout = ScopeLayout(
            global_base=home / VSCODE_DIR,
            repo_dir=VSCODE_DIR,
            path_scope_at_repo_root=True,
        )

    @property
    def client_id(self) -> str:
        return CLIENT_ID

    @property
    def display_name(self) -> str:
        return "GitHub Copilot"

    @property
    def supported_types(self) -> tuple[AssetType, ...]:
        return (SKILL, RULE, COMMAND, AGENT, MCP)

    def is_installed(self) -> bool:
        # Copilot spans many editors; ~/.copilot is the best available signal
        return (self._home / GLOBAL_DIR).is_dir()

    def get_version(self, cancel: CancelToken) -> str | None:
        return query_version(["copilot", "version"], cancel)

    def supports_asset_type(self, asset_type: AssetType) -> bool:
        return asset_type in self.supported_types

    def _mcp_registration(self, base: Path) -> McpRegistration:
        return McpRegistration(base / MCP_FILE, JSON, MCP_SERVERS, encode_type_field)

    def _handler_for(self, asset_type: AssetType, scope: InstallScope) -> tuple[AssetHandler, Path]:
        if asset_type == MCP:
            mcp_base = self._mcp_layout.resolve(scope, asset_type)
            return McpHandler(self._mcp_registration(mcp_base), supports_remote=False), mcp_base

        base = self._layout.resolve(scope, asset_type)
        handler: AssetHandler
        if asset_type == SKILL:
            handler = SkillHandler(_SKILLS)
        elif asset_type == RULE:
            handler = PromptFileHandler(_INSTRUCTIONS, render=rule_renderer(RULE_CAPABILITIES))
        elif asset_type == COMMAND:
            handler = PromptFileHandler(_PROMPTS)
        elif asset_type == AGENT:
            handler = PromptFileHandler(_AGENTS)
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
        logger.debug("No asset support setup needed for %s", CLIENT_ID)

    def get_asset_path(self, name: str, asset_type: AssetType, scope: InstallScope) -> Path:
        handler, base = self._handler_for(asset_type, scope)
        return handler.asset_path(name, base)

    def verify_assets(self, assets: Sequence[Asset], scope: InstallScope) -> list[VerifyResult]:
        return verify_batch(self.supported_types, assets, scope, self._handler_for)

    def scan_installed_assets(self, scope: InstallScope) -> list[InstalledAssetInfo]:
        return scan_all(self.supported_types, scope, self._handler_for)

    def bootstrap_options(self) -> list[BootstrapOption]:
        # Copilot has no hook mechanism
        return [sx_query_mcp_option()]

    def install_bootstrap(self, options: Sequence[BootstrapOption]) -> list[AssetResult]:
        registration = self._mcp_registration(self._home / VSCODE_DIR)
        return run_bootstrap(
            CLIENT_ID,
            options,
            {SX_QUERY_MCP_KEY: lambda option: install_query_mcp(option, registration)},
        )

    def uninstall_bootstrap(self, options: Sequence[BootstrapOption]) -> list[AssetResult]:
        registration = self._mcp_registration(self._home / VSCODE_DIR)
        return run_bootstrap(
            CLIENT_ID,
            options,
            {SX_QUERY_MCP_KEY: lambda option: uninstall_query_mcp(option, registration)},
        )

    def should_install(self, hook_input: Mapping[str, object] | None) -> bool:
        return True

    def rule_capabilities(self) -> RuleCapabilities | None:
        return RULE_CAPABILITIES
