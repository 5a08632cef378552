"""Cursor client.

Assets live under `~/.cursor` or `.cursor/`. Hooks are flat command entries
in `hooks.json` (`{"version": 1, "hooks": {...}}`); MCP servers go to
`mcp.json`. Rules are `.mdc` files with `globs`/`alwaysApply` frontmatter.
"""

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from sx.assets.installed import InstalledAssetInfo, SkillContent
from sx.assets.types import COMMAND, HOOK, MCP, RULE, SKILL, Asset, AssetType
from sx.bootstrap.native import (
    install_command_hook,
    install_query_mcp,
    run_bootstrap,
    uninstall_command_hook,
    uninstall_query_mcp,
)
from sx.bootstrap.options import (
    CURSOR_SESSION_HOOK,
    CURSOR_SESSION_HOOK_KEY,
    SX_QUERY_MCP_KEY,
    BootstrapOption,
    sx_query_mcp_option,
)
from sx.clients.batch import install_batch, scan_all, uninstall_batch, verify_batch
from sx.clients.types import AssetResult, InstallRequest, UninstallRequest, VerifyResult
from sx.core.cancellation import CancelToken
from sx.core.errors import AssetValidationError
from sx.core.frontmatter import render_markdown_frontmatter
from sx.core.process import query_version
from sx.core.scope import InstallScope, ScopeLayout
from sx.core.session_cache import SessionCache
from sx.handlers.base import AssetHandler
from sx.handlers.dirasset import DirectoryAssetOps
from sx.handlers.fileasset import FileAssetOps
from sx.handlers.hook import HookHandler, HookTarget, flat_hook_entry
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
from sx.native_config.mcp import MCP_OWNED_FIELDS, McpRegistration, encode_plain
from sx.native_config.sections import NamedEntryTable
from sx.native_config.values import ConfigValue

logger = logging.getLogger(__name__)

CLIENT_ID = "cursor"
CONFIG_DIR = ".cursor"
HOOKS_FILE = "hooks.json"
MCP_FILE = "mcp.json"
SKILLS_RULE_FILE = "sx-skills.mdc"

HOOKS_DEFAULTS: Mapping[str, ConfigValue] = {"version": 1}

EVENT_MAP: Mapping[str, str] = {
    "session-start": "sessionStart",
    "session-end": "sessionEnd",
    "pre-tool-use": "preToolUse",
    "post-tool-use": "postToolUse",
    "post-tool-use-failure": "postToolUseFailure",
    "user-prompt-submit": "beforeSubmitPrompt",
    "stop": "stop",
    "subagent-start": "subagentStart",
    "subagent-stop": "subagentStop",
    "pre-compact": "preCompact",
}

SESSION_HOOK_EVENT = "beforeSubmitPrompt"
SESSION_HOOK_COMMAND = f"sx install --hook-mode --client={CLIENT_ID}"

MCP_SERVERS = NamedEntryTable(("mcpServers",), MCP_OWNED_FIELDS, label="MCP server")


def _generate_rule(rule: RuleDefinition) -> str:
    fields: dict[str, object] = {}
    if rule.description:
        fields["description"] = rule.description
    # Rules without globs would never be attached, so they always apply
    if rule.always_apply or not rule.globs:
        fields["alwaysApply"] = True
    if len(rule.globs) == 1:
        fields["globs"] = rule.globs[0]
    elif rule.globs:
        fields["globs"] = list(rule.globs)
    return render_markdown_frontmatter(fields, with_title(rule))


def _parse_rule(content: str) -> ParsedRule:
    return parse_rule_with_keys(CLIENT_ID, content, globs_key="globs")


RULE_CAPABILITIES = RuleCapabilities(
    client_name=CLIENT_ID,
    rules_directory=".cursor/rules",
    file_extension=".mdc",
    instruction_files=(),
    generate_rule_file=_generate_rule,
    parse_rule_file=_parse_rule,
)

_SKILLS = DirectoryAssetOps("skills", SKILL)
_COMMANDS = FileAssetOps("commands", COMMAND)
_RULES = FileAssetOps("rules", RULE, suffix=RULE_CAPABILITIES.file_extension)


def render_skills_rule(skills: Sequence[InstalledAssetInfo]) -> str:
    """Always-applied rule listing installed skills and where to read them."""
    lines = [
        "# Available skills",
        "",
        "Read a skill's SKILL.md before using it.",
        "",
    ]
    for skill in skills:
        entry = f"- **{skill.name}**"
        if skill.description:
            entry += f": {skill.description}"
        entry += f" (`{skill.install_path / 'SKILL.md'}`)"
        lines.append(entry)
    return render_markdown_frontmatter(
        {"description": "Skills installed by sx", "alwaysApply": True},
        "\n".join(lines) + "\n",
    )


class CursorClient:
    def __init__(self, home: Path, cache_dir: Path) -> None:
        self._home = home
        self._layout = ScopeLayout(global_base=home / CONFIG_DIR, repo_dir=CONFIG_DIR)
        self._sessions = SessionCache(cache_dir, CLIENT_ID)

    @property
    def client_id(self) -> str:
        return CLIENT_ID

    @property
    def display_name(self) -> str:
        return "Cursor"

    @property
    def supported_types(self) -> tuple[AssetType, ...]:
        return (SKILL, COMMAND, RULE, HOOK, MCP)

    def is_installed(self) -> bool:
        return (self._home / CONFIG_DIR).is_dir()

    def get_version(self, cancel: CancelToken) -> str | None:
        return query_version(["cursor", "--version"], cancel)

    def supports_asset_type(self, asset_type: AssetType) -> bool:
        return asset_type in self.supported_types

    def _mcp_registration(self, base: Path) -> McpRegistration:
        return McpRegistration(base / MCP_FILE, JSON, MCP_SERVERS, encode_plain)

    def _handler_for(self, asset_type: AssetType, scope: InstallScope) -> tuple[AssetHandler, Path]:
        base = self._layout.resolve(scope, asset_type)
        handler: AssetHandler
        if asset_type == SKILL:
            handler = SkillHandler(_SKILLS)
        elif asset_type == COMMAND:
            handler = PromptFileHandler(_COMMANDS)
        elif asset_type == RULE:
            handler = PromptFileHandler(_RULES, render=rule_renderer(RULE_CAPABILITIES))
        elif asset_type == HOOK:
            handler = HookHandler(
                HookTarget(
                    client_id=CLIENT_ID,
                    config_path=base / HOOKS_FILE,
                    fmt=JSON,
                    event_map=EVENT_MAP,
                    build_entry=flat_hook_entry,
                    defaults=HOOKS_DEFAULTS,
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
        return _SKILLS.scan_installed(self._layout.resolve(scope, SKILL))

    def read_skill(self, name: str, scope: InstallScope) -> SkillContent | None:
        return _SKILLS.read_prompt_content(self._layout.resolve(scope, SKILL), name)

    def _visible_skills(self, scope: InstallScope) -> list[InstalledAssetInfo]:
        """Skills visible from a scope; path shadows repo, repo shadows global."""
        bases = [self._layout.resolve(scope, SKILL)]
        if scope.scope_type == "path":
            bases.append(self._layout.resolve(InstallScope.repository(scope.repo_root), SKILL))
        if scope.scope_type != "global":
            bases.append(self._layout.global_base)

        seen: set[str] = set()
        skills: list[InstalledAssetInfo] = []
        for base in bases:
            for skill in _SKILLS.scan_installed(base):
                if skill.name in seen:
                    continue
                seen.add(skill.name)
                skills.append(skill)
        return skills

    def ensure_asset_support(self, scope: InstallScope) -> None:
        """Write `rules/sx-skills.mdc` so Cursor agents learn about installed skills.

        Global rules are not read by Cursor, so a global scope has no rule file.
        """
        if scope.scope_type == "global":
            logger.debug("No local target for the skills rule in global scope")
            return

        rule_path = self._layout.resolve(scope, RULE) / "rules" / SKILLS_RULE_FILE
        skills = self._visible_skills(scope)
        if not skills:
            if rule_path.exists():
                rule_path.unlink()
            return
        rule_path.parent.mkdir(parents=True, exist_ok=True)
        rule_path.write_text(render_skills_rule(skills), encoding="utf-8")
        logger.debug("Wrote skills rule with %d skills to %s", len(skills), rule_path)

    def get_asset_path(self, name: str, asset_type: AssetType, scope: InstallScope) -> Path:
        handler, base = self._handler_for(asset_type, scope)
        return handler.asset_path(name, base)

    def verify_assets(self, assets: Sequence[Asset], scope: InstallScope) -> list[VerifyResult]:
        return verify_batch(self.supported_types, assets, scope, self._handler_for)

    def scan_installed_assets(self, scope: InstallScope) -> list[InstalledAssetInfo]:
        return scan_all(self.supported_types, scope, self._handler_for)

    def bootstrap_options(self) -> list[BootstrapOption]:
        return [CURSOR_SESSION_HOOK, sx_query_mcp_option()]

    def install_bootstrap(self, options: Sequence[BootstrapOption]) -> list[AssetResult]:
        hooks_path = self._home / CONFIG_DIR / HOOKS_FILE
        registration = self._mcp_registration(self._home / CONFIG_DIR)
        return run_bootstrap(
            CLIENT_ID,
            options,
            {
                CURSOR_SESSION_HOOK_KEY: lambda option: install_command_hook(
                    option.key,
                    hooks_path,
                    JSON,
                    SESSION_HOOK_EVENT,
                    SESSION_HOOK_COMMAND,
                    nested=False,
                    defaults=HOOKS_DEFAULTS,
                ),
                SX_QUERY_MCP_KEY: lambda option: install_query_mcp(option, registration),
            },
        )

    def uninstall_bootstrap(self, options: Sequence[BootstrapOption]) -> list[AssetResult]:
        hooks_path = self._home / CONFIG_DIR / HOOKS_FILE
        registration = self._mcp_registration(self._home / CONFIG_DIR)
        return run_bootstrap(
            CLIENT_ID,
            options,
            {
                CURSOR_SESSION_HOOK_KEY: lambda option: uninstall_command_hook(
                    option.key, hooks_path, JSON, SESSION_HOOK_COMMAND, nested=False
                ),
                SX_QUERY_MCP_KEY: lambda option: uninstall_query_mcp(option, registration),
            },
        )

    def should_install(self, hook_input: Mapping[str, object] | None) -> bool:
        """Install once per conversation when triggered by beforeSubmitPrompt.

        The session is recorded before installing, so a failed install is
        not retried until the next conversation.
        """
        if hook_input is None:
            return True
        conversation_id = hook_input.get("conversation_id")
        if not isinstance(conversation_id, str) or not conversation_id:
            return True
        if self._sessions.has_session(conversation_id):
            logger.debug("Conversation %s already seen, skipping install", conversation_id)
            return False
        self._sessions.record_session(conversation_id)
        return True

    def rule_capabilities(self) -> RuleCapabilities | None:
        return RULE_CAPABILITIES
