"""Tests for ClientRegistry and default composition."""

from pathlib import Path

import pytest

from sx.assets.types import AGENT, CLAUDE_CODE_PLUGIN, HOOK
from sx.clients.claude_code import ClaudeCodeClient
from sx.clients.codex import CodexClient
from sx.clients.composition import build_default_registry
from sx.clients.registry import ClientRegistry
from sx.core.errors import RegistryError, RegistryFrozenError, UnknownClientError


def test_lookup_before_freeze_raises(tmp_path: Path) -> None:
    registry = ClientRegistry()
    registry.register(ClaudeCodeClient(tmp_path))

    with pytest.raises(RegistryError, match="before it was frozen"):
        registry.get("claude-code")
    with pytest.raises(RegistryError):
        registry.all()


def test_register_after_freeze_raises(tmp_path: Path) -> None:
    registry = ClientRegistry()
    registry.freeze()

    with pytest.raises(RegistryFrozenError):
        registry.register(CodexClient(tmp_path))


def test_duplicate_id_raises(tmp_path: Path) -> None:
    registry = ClientRegistry()
    registry.register(CodexClient(tmp_path))

    with pytest.raises(RegistryError, match="already registered: codex"):
        registry.register(CodexClient(tmp_path))


def test_unknown_client(tmp_path: Path) -> None:
    registry = build_default_registry(tmp_path, tmp_path / "cache")

    with pytest.raises(UnknownClientError, match="unknown client: vim"):
        registry.get("vim")


def test_default_registry_order(tmp_path: Path) -> None:
    registry = build_default_registry(tmp_path, tmp_path / "cache")

    assert registry.is_frozen
    assert registry.ids() == ["claude-code", "cursor", "codex", "gemini", "github-copilot"]


def test_detect_installed_uses_home_directories(tmp_path: Path) -> None:
    (tmp_path / ".codex").mkdir()
    (tmp_path / ".gemini").mkdir()
    registry = build_default_registry(tmp_path, tmp_path / "cache")

    assert [client.client_id for client in registry.detect_installed()] == ["codex", "gemini"]


def test_filter_by_asset_type(tmp_path: Path) -> None:
    registry = build_default_registry(tmp_path, tmp_path / "cache")

    assert [c.client_id for c in registry.filter_by_asset_type(AGENT)] == [
        "claude-code",
        "github-copilot",
    ]
    assert [c.client_id for c in registry.filter_by_asset_type(HOOK)] == [
        "claude-code",
        "cursor",
        "gemini",
    ]
    assert [c.client_id for c in registry.filter_by_asset_type(CLAUDE_CODE_PLUGIN)] == [
        "claude-code"
    ]
