"""Tests for `sx bootstrap`."""

import json
import tomllib
from pathlib import Path

from click.testing import CliRunner

from sx.cli.cli import cli
from sx.config.types import SxConfig
from tests.fakes.context import build_test_context
from tests.fakes.installation import FakeSxInstallation


def test_options_lists_each_client(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli,
        ["bootstrap", "options", "--client", "claude-code", "--client", "github-copilot"],
        obj=build_test_context(tmp_path),
    )

    assert result.exit_code == 0, result.output
    assert "session_hook" in result.output
    assert "analytics_hook" in result.output
    assert "GitHub Copilot" in result.output
    assert "[off] sx_query_mcp" in result.output


def test_install_writes_codex_notify_and_saves_choices(tmp_path: Path) -> None:
    ctx = build_test_context(tmp_path)

    result = CliRunner().invoke(
        cli,
        [
            "bootstrap",
            "install",
            "--client",
            "codex",
            "--enable",
            "analytics_hook",
            "--disable",
            "sx_query_mcp",
        ],
        obj=ctx,
    )

    assert result.exit_code == 0, result.output
    config = tomllib.loads((tmp_path / "home" / ".codex" / "config.toml").read_text())
    assert config["notify"] == ["sx", "report-usage", "--client=codex"]
    assert "mcp" not in config
    assert isinstance(ctx.installation, FakeSxInstallation)
    assert ctx.installation.saved_configs[-1].bootstrap == {
        "analytics_hook": True,
        "sx_query_mcp": False,
    }


def test_install_uses_saved_choices_and_removes_disabled(tmp_path: Path) -> None:
    settings = tmp_path / "home" / ".claude" / "settings.json"
    runner = CliRunner()
    enabled = build_test_context(tmp_path)
    runner.invoke(cli, ["bootstrap", "install", "--client", "claude-code"], obj=enabled)
    hooks = json.loads(settings.read_text())["hooks"]
    assert set(hooks) == {"SessionStart", "PostToolUse"}

    disabled = build_test_context(
        tmp_path, config=SxConfig(bootstrap={"analytics_hook": False})
    )
    result = runner.invoke(cli, ["bootstrap", "install", "--client", "claude-code"], obj=disabled)

    assert result.exit_code == 0, result.output
    hooks = json.loads(settings.read_text())["hooks"]
    assert hooks.get("PostToolUse", []) == []
    assert len(hooks["SessionStart"]) == 1


def test_install_rejects_unknown_option(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli,
        ["bootstrap", "install", "--client", "gemini", "--enable", "telemetry"],
        obj=build_test_context(tmp_path),
    )

    assert result.exit_code == 2
    assert "unknown bootstrap option 'telemetry'" in result.output


def test_install_rejects_enable_and_disable_of_same_option(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli,
        [
            "bootstrap",
            "install",
            "--client",
            "gemini",
            "--enable",
            "session_hook",
            "--disable",
            "session_hook",
        ],
        obj=build_test_context(tmp_path),
    )

    assert result.exit_code == 2
    assert "both enabled and disabled" in result.output


def test_install_ask_prompts_for_each_option(tmp_path: Path) -> None:
    ctx = build_test_context(tmp_path)

    result = CliRunner().invoke(
        cli,
        ["bootstrap", "install", "--client", "cursor", "--ask"],
        obj=ctx,
        input="n\ny\n",
    )

    assert result.exit_code == 0, result.output
    assert isinstance(ctx.installation, FakeSxInstallation)
    assert ctx.installation.saved_configs[-1].bootstrap == {
        "cursor_session_hook": False,
        "sx_query_mcp": True,
    }
    mcp = json.loads((tmp_path / "home" / ".cursor" / "mcp.json").read_text())
    assert mcp["mcpServers"]["sx"] == {"command": "sx", "args": ["serve"]}


def test_uninstall_leaves_user_hooks(tmp_path: Path) -> None:
    settings = tmp_path / "home" / ".claude" / "settings.json"
    settings.parent.mkdir(parents=True)
    user_hook = {"hooks": [{"type": "command", "command": "echo hello"}]}
    settings.write_text(json.dumps({"hooks": {"SessionStart": [user_hook]}}))
    ctx = build_test_context(tmp_path)
    runner = CliRunner()
    runner.invoke(cli, ["bootstrap", "install", "--client", "claude-code"], obj=ctx)

    result = runner.invoke(cli, ["bootstrap", "uninstall", "--client", "claude-code"], obj=ctx)

    assert result.exit_code == 0, result.output
    hooks = json.loads(settings.read_text())["hooks"]
    assert hooks["SessionStart"] == [user_hook]
