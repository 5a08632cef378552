"""Tests for bootstrap option helpers."""

from sx.bootstrap.options import (
    ANALYTICS_HOOK_KEY,
    SESSION_HOOK_KEY,
    SX_QUERY_MCP_KEY,
    analytics_hook_option,
    contains_key,
    filter_options,
    resolve_enabled,
    session_hook_option,
    sx_query_mcp_option,
)

OPTIONS = [
    session_hook_option("Claude Code", "SessionStart"),
    analytics_hook_option("Claude Code", "PostToolUse"),
    sx_query_mcp_option(),
]


def test_contains_key() -> None:
    assert contains_key(OPTIONS, SESSION_HOOK_KEY)
    assert not contains_key(OPTIONS, "cursor_session_hook")


def test_filter_options() -> None:
    selected = filter_options(OPTIONS, lambda key: key == SX_QUERY_MCP_KEY)

    assert [option.key for option in selected] == [SX_QUERY_MCP_KEY]


def test_resolve_enabled_uses_defaults_without_choices() -> None:
    keys = [option.key for option in resolve_enabled(OPTIONS, {})]

    assert keys == [SESSION_HOOK_KEY, ANALYTICS_HOOK_KEY]


def test_resolve_enabled_prefers_saved_choices() -> None:
    choices = {ANALYTICS_HOOK_KEY: False, SX_QUERY_MCP_KEY: True}

    keys = [option.key for option in resolve_enabled(OPTIONS, choices)]

    assert keys == [SESSION_HOOK_KEY, SX_QUERY_MCP_KEY]


def test_query_mcp_registration() -> None:
    option = sx_query_mcp_option()

    assert option.mcp_config is not None
    assert option.mcp_config.name == "sx"
    assert option.mcp_config.command == "sx"
    assert option.mcp_config.args == ("serve",)
