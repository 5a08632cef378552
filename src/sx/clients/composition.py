"""Startup composition of the default client registry."""

from pathlib import Path

from sx.clients.claude_code import ClaudeCodeClient
from sx.clients.codex import CodexClient
from sx.clients.cursor import CursorClient
from sx.clients.gemini import GeminiClient
from sx.clients.github_copilot import GitHubCopilotClient
from sx.clients.registry import ClientRegistry


def build_default_registry(home: Path, cache_dir: Path) -> ClientRegistry:
    """Register every supported client, in display order, and freeze.

    Args:
        home: User home directory clients resolve global paths against
        cache_dir: Directory for per-client caches (e.g. Cursor sessions)
    """
    registry = ClientRegistry()
    registry.register(ClaudeCodeClient(home))
    registry.register(CursorClient(home, cache_dir))
    registry.register(CodexClient(home))
    registry.register(GeminiClient(home))
    registry.register(GitHubCopilotClient(home))
    registry.freeze()
    return registry
