"""Codex client.

Codex keeps everything in `config.toml`: MCP servers as `[[mcp]]` tables
and the analytics hook as the `notify` command. Repository skills go to
`.agents/` rather than `.codex/`.
"""

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from sx.assets.installed import InstalledAssetInfo, SkillContent
from sx.assets.types import COMMAND, MCP, SKILL, Asset, AssetType
from sx.bootstrap.native import (
    install_notify,
    install_query_mcp,
    run_bootstrap,
    uninstall_notify,
    uninstall_query_mcp,
)
from sx.bootstrap.options import (
    ANALYTICS_HOOK_KEY,
    SX_QUERY_MCP_KEY,
    BootstrapOption,
    analytics_hook_option,
    sx_query_mcp_option,
)
from sx.clients.batch import install_batch, scan_all, uninstall_batch, verify_batch
from sx.clients.types import AssetResult, InstallRequest, UninstallRequest, VerifyResult
from sx.core.cancellation import CancelToken
from sx.core.errors import AssetValidationError
from sx.core.process import query_version
from sx.core.scope import InstallScope, ScopeLayout
from sx.handlers.base import AssetHandler
from sx.handlers.dirasset import DirectoryAssetOps
from sx.handlers.fileasset import FileAssetOps
from sx.handlers.mcp import McpHandler
from sx.handlers.prompt_file import PromptFileHandler
from sx.handlers.rules import RuleCapabilities
from sx.handlers.skill import SkillHandler
from sx.native_config.formats import TOML
from sx.native_config.mcp import MCP_OWNED_FIELDS, McpRegistration, encode_transport_field
from sx.native_config.sections import NamedEntryList

logger = logging.getLogger(__name__)

CLIENT_ID = "codex"
CONFIG_DIR = ".codex"
CONFIG_FILE = "config.toml"

NOTIFY_COMMAND = ("sx", "report-usage", f"--client={CLIENT_ID}")
# Notify values written by earlier sx releases, still recognized as ours
PREVIOUS_NOTIFY_COMMANDS: tuple[tuple[str, ...], ...] = ()

MCP_SERVERS = NamedEntryList("mcp", MCP_OWNED_FIELDS, label="MCP server")

_SKILLS = DirectoryAssetOps("skills", SKILL)
_PROMPTS = FileAssetOps("prompts", COMMAND)


class CodexClient:
    def __init__(self, home: Path) -> None:
        self._home = home
        self._layout = ScopeLayout(
            global_base=home / CONFIG_DIR,
            repo_dir=CONFIG_DIR,
            type_overrides={SKILL.key: ".agents"},
        )

    @property
    def client_id(self) -> str:
        return CLIENT_ID

    @property
    def display_name(self) -> str:
        return "Codex"

    @property
    def supported_types(self) -> tuple[AssetType, ...]:
        return (SKILL, COMMAND, MCP)

    def is_installed(self) -> bool:
        return (self._home / CONFIG_DIR).is_dir()

    def get_version(self, cancel: CancelToken) -> str | None:
        return query_version(["codex", "--version"], cancel)

    def supports_asset_type(self, asset_type: AssetType) -> bool:
        return asset_type in self.supported_types

    def _mcp_registration(self, base: Path) -> McpRegistration:
        return McpRegistration(base / CONFIG_FILE, TOML, MCP_SERVERS, encode_transport_field)

    def _handler_for(self, asset_type: AssetType, scope: InstallScope) -> tuple[AssetHandler, Path]:
        base = self._layout.resolve(scope, asset_type)
        handler: AssetHandler
        if asset_type == SKILL:
            handler = SkillHandler(_SKILLS)
        elif asset_type == COMMAND:
            handler = PromptFileHandler(_PROMPTS)
        elif asset_type == MCP:
            handler = McpHandler(self._mcp_registration(base), supports_remote=False)
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
        # Codex has no session-start event; only turn completion via notify
        return [
            analytics_hook_option(self.display_name, "notify"),
            sx_query_mcp_option(),
        ]

    def install_bootstrap(self, options: Sequence[BootstrapOption]) -> list[AssetResult]:
        config_path = self._home / CONFIG_DIR / CONFIG_FILE
        registration = self._mcp_registration(self._home / CONFIG_DIR)
        return run_bootstrap(
            CLIENT_ID,
            options,
            {
                ANALYTICS_HOOK_KEY: lambda option: install_notify(
                    option.key, config_path, TOML, NOTIFY_COMMAND, PREVIOUS_NOTIFY_COMMANDS
                ),
                SX_QUERY_MCP_KEY: lambda option: install_query_mcp(option, registration),
            },
        )

    def uninstall_bootstrap(self, options: Sequence[BootstrapOption]) -> list[AssetResult]:
        config_path = self._home / CONFIG_DIR / CONFIG_FILE
        registration = self._mcp_registration(self._home / CONFIG_DIR)
        return run_bootstrap(
            CLIENT_ID,
            options,
            {
                ANALYTICS_HOOK_KEY: lambda option: uninstall_notify(
                    option.key, config_path, TOML, NOTIFY_COMMAND, PREVIOUS_NOTIFY_COMMANDS
                ),
                SX_QUERY_MCP_KEY: lambda option: uninstall_query_mcp(option, registration),
            },
        )

    def should_install(self, hook_input: Mapping[str, object] | None) -> bool:
        return True

    def rule_capabilities(self) -> RuleCapabilities | None:
        return None
