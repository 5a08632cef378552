"""Tests for `sx verify` and `sx list`."""

from pathlib import Path

from click.testing import CliRunner

from sx.cli.cli import cli
from tests.fakes.archives import command_files, skill_files, write_archive
from tests.fakes.context import build_test_context


def test_verify_installed_and_missing(tmp_path: Path) -> None:
    alpha = write_archive(tmp_path, skill_files("alpha"), "alpha.zip")
    beta = write_archive(tmp_path, skill_files("beta"), "beta.zip")
    ctx = build_test_context(tmp_path)
    runner = CliRunner()
    runner.invoke(cli, ["install", str(alpha), "--client", "claude-code"], obj=ctx)

    installed = runner.invoke(cli, ["verify", str(alpha), "--client", "claude-code"], obj=ctx)
    missing = runner.invoke(
        cli, ["verify", str(alpha), str(beta), "--client", "claude-code"], obj=ctx
    )

    assert installed.exit_code == 0, installed.output
    assert "✓ alpha: installed" in installed.output
    assert missing.exit_code == 1
    assert "✗ beta: directory not found" in missing.output


def test_verify_detects_version_mismatch(tmp_path: Path) -> None:
    old = write_archive(tmp_path, command_files("deploy", version="1.0.0"), "old.zip")
    new = write_archive(tmp_path, command_files("deploy", version="2.0.0"), "new.zip")
    ctx = build_test_context(tmp_path)
    runner = CliRunner()
    runner.invoke(cli, ["install", str(old), "--client", "codex"], obj=ctx)

    result = runner.invoke(cli, ["verify", str(new), "--client", "codex"], obj=ctx)

    assert result.exit_code == 1
    assert "version mismatch: installed 1.0.0, expected 2.0.0" in result.output


def test_list_shows_installed_assets(tmp_path: Path) -> None:
    ctx = build_test_context(tmp_path)
    runner = CliRunner()
    for files, filename in [(skill_files("alpha"), "a.zip"), (command_files("deploy"), "d.zip")]:
        archive = write_archive(tmp_path, files, filename)
        runner.invoke(cli, ["install", str(archive), "--client", "claude-code"], obj=ctx)

    result = runner.invoke(cli, ["list", "--client", "claude-code"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "alpha" in result.output
    assert "deploy" in result.output
    assert "1.0.0" in result.output


def test_list_with_nothing_installed(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli, ["list", "--client", "gemini"], obj=build_test_context(tmp_path)
    )

    assert result.exit_code == 0
    assert "No assets installed." in result.output


def test_list_repo_scope_without_repository(tmp_path: Path) -> None:
    ctx = build_test_context(tmp_path, cwd=tmp_path / "nowhere")

    result = CliRunner().invoke(cli, ["list", "--client", "codex", "--scope", "repo"], obj=ctx)

    assert result.exit_code == 1
    assert "Error: Codex:" in result.output
