"""Tests for `sx clients`."""

from pathlib import Path

from click.testing import CliRunner

from sx.cli.cli import cli
from tests.fakes.context import build_test_context


def test_clients_lists_every_registered_client(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["clients"], obj=build_test_context(tmp_path))

    assert result.exit_code == 0, result.output
    for client_id in ["claude-code", "cursor", "codex", "gemini", "github-copilot"]:
        assert client_id in result.output
    assert "skill, command, agent, rule, hook, mcp" in result.output
