"""Per-client install layouts and native config dialects."""

import json
import tomllib
from pathlib import Path

from sx.assets.types import CLAUDE_CODE_PLUGIN, HOOK, MCP, RULE, SKILL, Asset
from sx.bootstrap.options import ANALYTICS_HOOK_KEY
from sx.clients.claude_code import ClaudeCodeClient
from sx.clients.codex import CodexClient
from sx.clients.cursor import CursorClient
from sx.clients.gemini import GeminiClient, convert_prompt_syntax
from sx.clients.github_copilot import GitHubCopilotClient
from sx.clients.orchestrator import install, uninstall
from sx.clients.types import InstallRequest, UninstallRequest
from sx.core.frontmatter import parse_markdown_frontmatter
from sx.core.scope import InstallScope
from tests.fakes.archives import (
    agent_files,
    command_files,
    config_only_mcp_files,
    hook_files,
    make_bundle,
    plugin_files,
    remote_mcp_files,
    rule_files,
    skill_files,
)


def _install(client, *file_sets, scope=None):
    request = InstallRequest(
        bundles=tuple(make_bundle(files) for files in file_sets),
        scope=scope if scope is not None else InstallScope.global_scope(),
    )
    return install(client, request)


def _repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    return repo


def test_claude_repo_scope_layout(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    client = ClaudeCodeClient(tmp_path / "home")

    batch = _install(
        client,
        skill_files("alpha"),
        agent_files("reviewer"),
        config_only_mcp_files("search"),
        scope=InstallScope.repository(repo),
    )

    assert batch.ok
    assert (repo / ".claude" / "skills" / "alpha" / "SKILL.md").exists()
    assert (repo / ".claude" / "agents" / "reviewer.md").exists()
    servers = json.loads((repo / ".mcp.json").read_text())["mcpServers"]
    assert servers["search"] == {"type": "stdio", "command": "npx", "args": ["-y", "@acme/server"]}
    assert not (tmp_path / "home").exists()


def test_claude_path_scope_nests_under_sub_path(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    client = ClaudeCodeClient(tmp_path / "home")

    _install(client, command_files("deploy"), scope=InstallScope.sub_path(repo, "services/api"))

    assert (repo / "services" / "api" / ".claude" / "commands" / "deploy.md").exists()


def test_claude_hook_is_nested_and_tagged(tmp_path: Path) -> None:
    client = ClaudeCodeClient(tmp_path)

    batch = _install(client, hook_files("greet"))

    assert batch.ok
    settings = json.loads((tmp_path / ".claude" / "settings.json").read_text())
    [entry] = settings["hooks"]["SessionStart"]
    assert entry["_artifact"] == "greet"
    command = entry["hooks"][0]["command"]
    assert str(tmp_path / ".claude" / "hooks" / "greet" / "scripts" / "run.py") in command
    assert command.endswith("--verbose")


def test_codex_skills_go_to_agents_dir_in_repo(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    client = CodexClient(tmp_path / "home")

    _install(
        client,
        skill_files("alpha"),
        command_files("deploy"),
        scope=InstallScope.repository(repo),
    )

    assert (repo / ".agents" / "skills" / "alpha" / "SKILL.md").exists()
    assert (repo / ".codex" / "prompts" / "deploy.md").exists()


def test_codex_mcp_is_array_of_tables(tmp_path: Path) -> None:
    client = CodexClient(tmp_path)
    config = tmp_path / ".codex" / "config.toml"
    config.parent.mkdir()
    config.write_text('model = "o3"\n')

    batch = _install(client, config_only_mcp_files("search"), remote_mcp_files("hosted"))

    assert [r.status for r in batch.results] == ["success", "skipped"]
    data = tomllib.loads(config.read_text())
    assert data["model"] == "o3"
    assert data["mcp"] == [
        {
            "name": "search",
            "transport": "stdio",
            "command": "npx",
            "args": ["-y", "@acme/server"],
        }
    ]


def test_codex_bootstrap_reports_foreign_notify(tmp_path: Path) -> None:
    client = CodexClient(tmp_path)
    config = tmp_path / ".codex" / "config.toml"
    config.parent.mkdir()
    config.write_text('notify = ["my-notifier", "--loud"]\n')
    options = [o for o in client.bootstrap_options() if o.key == ANALYTICS_HOOK_KEY]

    [result] = client.install_bootstrap(options)

    assert result.status == "skipped"
    assert "not managed by sx" in result.message
    assert tomllib.loads(config.read_text())["notify"] == ["my-notifier", "--loud"]


def test_cursor_rules_use_mdc_frontmatter(tmp_path: Path) -> None:
    client = CursorClient(tmp_path, tmp_path / "cache")

    _install(client, rule_files("style", globs=["*.py"]), rule_files("always"))

    rules = tmp_path / ".cursor" / "rules"
    style = parse_markdown_frontmatter((rules / "style.mdc").read_text())
    always = parse_markdown_frontmatter((rules / "always.mdc").read_text())
    assert style.metadata == {"description": "Style rules", "globs": "*.py"}
    assert "Use four spaces." in style.body
    assert always.metadata["alwaysApply"] is True


def test_cursor_hooks_file_has_version(tmp_path: Path) -> None:
    client = CursorClient(tmp_path, tmp_path / "cache")

    _install(client, hook_files("greet"))

    hooks = json.loads((tmp_path / ".cursor" / "hooks.json").read_text())
    assert hooks["version"] == 1
    [entry] = hooks["hooks"]["sessionStart"]
    assert entry["_artifact"] == "greet"
    assert entry["command"].endswith("--verbose")


def test_cursor_should_install_without_conversation(tmp_path: Path) -> None:
    client = CursorClient(tmp_path, tmp_path / "cache")

    assert client.should_install(None)
    assert client.should_install({"conversation_id": ""})
    assert client.should_install({"conversation_id": "abc"})
    assert not client.should_install({"conversation_id": "abc"})


def test_gemini_commands_are_toml_with_args_placeholder(tmp_path: Path) -> None:
    client = GeminiClient(tmp_path)

    batch = _install(client, command_files("deploy"), skill_files("alpha"))

    assert batch.ok
    commands = tmp_path / ".gemini" / "commands"
    deploy = tomllib.loads((commands / "deploy.toml").read_text())
    alpha = tomllib.loads((commands / "alpha.toml").read_text())
    assert deploy["description"] == "A command"
    assert "Run {{args}}" in deploy["prompt"]
    assert "$ARGUMENTS" not in deploy["prompt"]
    assert "Do the thing." in alpha["prompt"]


def test_gemini_skill_cannot_overwrite_command_of_same_name(tmp_path: Path) -> None:
    client = GeminiClient(tmp_path)
    scope = InstallScope.global_scope()
    _install(client, command_files("deploy"))

    batch = _install(client, skill_files("deploy"))
    removal = uninstall(
        client, UninstallRequest(assets=(Asset("deploy", "1.0.0", SKILL),), scope=scope)
    )

    assert [(r.status, r.message) for r in batch.results] == [
        ("failed", "deploy.toml is already installed as a command asset")
    ]
    assert [(r.status, r.message) for r in removal.results] == [("success", "not installed")]
    deploy = tomllib.loads((tmp_path / ".gemini" / "commands" / "deploy.toml").read_text())
    assert "Run {{args}}" in deploy["prompt"]


def test_gemini_rule_is_unsupported(tmp_path: Path) -> None:
    batch = _install(GeminiClient(tmp_path), rule_files("style"))

    assert batch.results[0].status == "skipped"
    assert batch.results[0].message == "unsupported asset type: rule"


def test_gemini_remote_mcp_uses_url(tmp_path: Path) -> None:
    client = GeminiClient(tmp_path)

    _install(client, remote_mcp_files("hosted"))

    settings = json.loads((tmp_path / ".gemini" / "settings.json").read_text())
    assert settings["mcpServers"]["hosted"] == {"url": "https://mcp.example.com/sse"}


def test_gemini_post_tool_use_maps_to_after_tool(tmp_path: Path) -> None:
    client = GeminiClient(tmp_path)

    _install(client, hook_files("audit", event="post-tool-use"))

    settings = json.loads((tmp_path / ".gemini" / "settings.json").read_text())
    assert [e["_artifact"] for e in settings["hooks"]["AfterTool"]] == ["audit"]


def test_convert_prompt_syntax() -> None:
    converted = convert_prompt_syntax("Fix $ARGUMENTS using @./docs/guide.md and @/etc/hosts")

    assert converted == "Fix {{args}} using @{docs/guide.md} and @{/etc/hosts}"
    assert convert_prompt_syntax("install @org/pkg") == "install @org/pkg"


def test_copilot_repo_layout(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    client = GitHubCopilotClient(tmp_path / "home")

    batch = _install(
        client,
        rule_files("style", globs=["*.py", "*.pyi"]),
        command_files("deploy"),
        agent_files("reviewer"),
        config_only_mcp_files("search"),
        scope=InstallScope.sub_path(repo, "services/api"),
    )

    assert batch.ok
    github = repo / "services" / "api" / ".github"
    instructions = github / "instructions" / "style.instructions.md"
    rule = parse_markdown_frontmatter(instructions.read_text())
    assert rule.metadata["applyTo"] == "*.py,*.pyi"
    assert (github / "prompts" / "deploy.prompt.md").exists()
    assert (github / "agents" / "reviewer.agent.md").exists()
    servers = json.loads((repo / ".vscode" / "mcp.json").read_text())["servers"]
    assert servers["search"]["command"] == "npx"


def test_copilot_skips_remote_mcp_and_hooks(tmp_path: Path) -> None:
    batch = _install(GitHubCopilotClient(tmp_path), remote_mcp_files("hosted"), hook_files("h"))

    assert [(r.status, r.message) for r in batch.results] == [
        ("skipped", "unsupported transport: sse"),
        ("skipped", "unsupported asset type: hook"),
    ]


def test_verify_reports_unsupported_type(tmp_path: Path) -> None:
    [result] = CodexClient(tmp_path).verify_assets(
        [Asset("style", "1.0.0", RULE)], InstallScope.global_scope()
    )

    assert not result.installed
    assert result.message == "unsupported asset type: rule"


def test_get_asset_path(tmp_path: Path) -> None:
    client = ClaudeCodeClient(tmp_path)
    scope = InstallScope.global_scope()

    claude = tmp_path / ".claude"
    assert client.get_asset_path("alpha", SKILL, scope) == claude / "skills" / "alpha"
    assert client.get_asset_path("srv", MCP, scope) == claude / "mcp-servers" / "srv"
    assert client.get_asset_path("h", HOOK, scope) == claude / "hooks" / "h"


def test_read_skill_and_list_assets(tmp_path: Path) -> None:
    client = ClaudeCodeClient(tmp_path)
    scope = InstallScope.global_scope()
    _install(client, skill_files("alpha", description="Does alpha"), command_files("deploy"))

    skill = client.read_skill("alpha", scope)

    assert skill is not None
    assert skill.description == "Does alpha"
    assert skill.content == "# alpha\n\nDo the thing.\n"
    assert skill.base_dir == tmp_path / ".claude" / "skills" / "alpha"
    assert client.read_skill("missing", scope) is None
    assert [info.name for info in client.list_assets(scope)] == ["alpha"]


def test_rule_capabilities_only_for_rule_clients(tmp_path: Path) -> None:
    claude = ClaudeCodeClient(tmp_path).rule_capabilities()

    assert claude is not None
    assert claude.file_extension == ".md"
    assert CodexClient(tmp_path).rule_capabilities() is None
    assert GeminiClient(tmp_path).rule_capabilities() is None


def test_claude_plugin_is_registered_and_enabled(tmp_path: Path) -> None:
    client = ClaudeCodeClient(tmp_path)
    settings = tmp_path / ".claude" / "settings.json"
    settings.parent.mkdir()
    settings.write_text('{"model": "opus"}\n')

    batch = _install(client, plugin_files("toolkit", marketplace="acme"))

    assert batch.ok
    plugin_dir = tmp_path / ".claude" / "plugins" / "toolkit"
    assert (plugin_dir / ".claude-plugin" / "plugin.json").is_file()
    assert (plugin_dir / "commands" / "hello.md").is_file()
    registry = json.loads((tmp_path / ".claude" / "plugins" / "installed_plugins.json").read_text())
    assert registry["version"] == 2
    [entry] = registry["plugins"]["toolkit@acme"]
    assert entry["installPath"] == str(plugin_dir)
    assert entry["version"] == "1.0.0"
    assert entry["isLocal"] is False
    assert json.loads(settings.read_text()) == {
        "model": "opus",
        "enabledPlugins": {"toolkit@acme": True},
    }


def test_claude_plugin_auto_enable_off_leaves_settings_alone(tmp_path: Path) -> None:
    client = ClaudeCodeClient(tmp_path)

    batch = _install(client, plugin_files("toolkit", auto_enable=False))

    assert batch.ok
    registry = json.loads((tmp_path / ".claude" / "plugins" / "installed_plugins.json").read_text())
    assert registry["plugins"]["toolkit"][0]["isLocal"] is True
    assert not (tmp_path / ".claude" / "settings.json").exists()


def test_claude_plugin_uninstall_unregisters(tmp_path: Path) -> None:
    client = ClaudeCodeClient(tmp_path)
    scope = InstallScope.global_scope()
    _install(client, plugin_files("toolkit", marketplace="acme"))

    batch = uninstall(
        client,
        UninstallRequest(assets=(Asset("toolkit", "1.0.0", CLAUDE_CODE_PLUGIN),), scope=scope),
    )

    assert [(r.status, r.message) for r in batch.results] == [("success", "removed")]
    claude = tmp_path / ".claude"
    assert json.loads((claude / "plugins" / "installed_plugins.json").read_text())["plugins"] == {}
    assert json.loads((claude / "settings.json").read_text())["enabledPlugins"] == {}
    assert not (claude / "plugins" / "toolkit").exists()


def test_claude_plugin_requires_manifest(tmp_path: Path) -> None:
    files = plugin_files("toolkit")
    del files[".claude-plugin/plugin.json"]

    batch = _install(ClaudeCodeClient(tmp_path), files)

    assert batch.results[0].status == "failed"
    assert batch.results[0].message == "plugin manifest not found: .claude-plugin/plugin.json"
    assert not (tmp_path / ".claude" / "plugins" / "toolkit").exists()


def test_plugin_is_skipped_by_other_clients(tmp_path: Path) -> None:
    others = [
        CodexClient(tmp_path),
        CursorClient(tmp_path, tmp_path / "cache"),
        GeminiClient(tmp_path),
        GitHubCopilotClient(tmp_path),
    ]

    for client in others:
        batch = _install(client, plugin_files("toolkit"))
        assert [(r.status, r.message) for r in batch.results] == [
            ("skipped", "unsupported asset type: claude-code-plugin")
        ]
