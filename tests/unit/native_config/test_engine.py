"""Tests for the native config merge engine."""

import json
from pathlib import Path

import pytest

from sx.core.errors import NativeConfigError
from sx.native_config.engine import add_or_update, read_config, remove_entry, verify_present
from sx.native_config.formats import JSON, TOML
from sx.native_config.mcp import MCP_OWNED_FIELDS
from sx.native_config.sections import ManagedEntry, NamedEntryList, NamedEntryTable

SERVERS_TABLE = NamedEntryTable(("mcpServers",), MCP_OWNED_FIELDS, label="MCP server")
SERVERS_LIST = NamedEntryList("mcp", MCP_OWNED_FIELDS, label="MCP server")


def _write_json(path: Path, data: object) -> None:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def test_missing_file_reads_as_empty_document(tmp_path: Path) -> None:
    document = read_config(tmp_path / "absent.json", JSON, SERVERS_TABLE)

    assert document.known == ()
    assert dict(document.raw) == {}


def test_blank_file_reads_as_empty_document(tmp_path: Path) -> None:
    path = tmp_path / "blank.toml"
    path.write_text("\n  \n", encoding="utf-8")

    assert read_config(path, TOML, SERVERS_LIST).known == ()


def test_unparseable_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(NativeConfigError, match="failed to parse broken.json"):
        read_config(path, JSON, SERVERS_TABLE)


def test_add_keeps_foreign_keys_and_entries(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    _write_json(
        path,
        {
            "theme": "dark",
            "mcpServers": {"user-server": {"command": "uvx", "args": ["thing"], "alwaysAllow": []}},
            "permissions": {"allow": ["Bash(ls)"]},
        },
    )

    entry = ManagedEntry(key="mine", fields={"command": "npx", "args": ["x"]})
    add_or_update(path, JSON, SERVERS_TABLE, entry)

    data = json.loads(path.read_text())
    assert data["theme"] == "dark"
    assert data["permissions"] == {"allow": ["Bash(ls)"]}
    assert data["mcpServers"]["user-server"] == {
        "command": "uvx",
        "args": ["thing"],
        "alwaysAllow": [],
    }
    assert data["mcpServers"]["mine"] == {"command": "npx", "args": ["x"]}
    assert list(data) == ["theme", "mcpServers", "permissions"]


def test_update_replaces_owned_fields_and_keeps_foreign_ones(tmp_path: Path) -> None:
    path = tmp_path / "mcp.json"
    _write_json(
        path,
        {"mcpServers": {"mine": {"command": "old", "env": {"A": "1"}, "disabled": True}}},
    )

    add_or_update(path, JSON, SERVERS_TABLE, ManagedEntry(key="mine", fields={"command": "new"}))

    entry = json.loads(path.read_text())["mcpServers"]["mine"]
    assert entry == {"command": "new", "disabled": True}


def test_add_creates_parent_directories(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "dir" / "mcp.json"

    add_or_update(path, JSON, SERVERS_TABLE, ManagedEntry(key="a", fields={"command": "x"}))

    assert json.loads(path.read_text()) == {"mcpServers": {"a": {"command": "x"}}}


def test_add_twice_is_idempotent(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    entry = ManagedEntry(key="srv", fields={"command": "npx", "args": ["a"]})

    add_or_update(path, TOML, SERVERS_LIST, entry)
    add_or_update(path, TOML, SERVERS_LIST, entry)

    assert path.read_text().count('name = "srv"') == 1
    assert len(read_config(path, TOML, SERVERS_LIST).known) == 1


def test_toml_round_trip_keeps_comments_and_unmanaged_tables(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    original = (
        "# Codex configuration\n"
        'model = "o3"  # preferred model\n'
        "\n"
        "[[mcp]]\n"
        'name = "theirs"\n'
        'command = "uvx"\n'
        "\n"
        "[profiles.work]\n"
        'model = "o4-mini"\n'
    )
    path.write_text(original, encoding="utf-8")

    add_or_update(path, TOML, SERVERS_LIST, ManagedEntry(key="ours", fields={"command": "npx"}))
    assert remove_entry(path, TOML, SERVERS_LIST, "ours")

    text = path.read_text()
    assert "# Codex configuration" in text
    assert 'model = "o3"  # preferred model' in text
    assert "[profiles.work]" in text
    assert [e.key for e in read_config(path, TOML, SERVERS_LIST).known] == ["theirs"]


def test_remove_keeps_other_entries(tmp_path: Path) -> None:
    path = tmp_path / ".mcp.json"
    _write_json(
        path,
        {
            "mcpServers": {
                "my-server": {"command": "a"},
                "other-server": {"command": "b"},
            }
        },
    )

    removed = remove_entry(path, JSON, SERVERS_TABLE, "my-server")

    assert removed
    assert json.loads(path.read_text()) == {"mcpServers": {"other-server": {"command": "b"}}}


def test_add_then_remove_restores_other_entries(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[[mcp]]\nname = "keep"\ncommand = "uvx"\nargs = ["k"]\n', encoding="utf-8")
    before = read_config(path, TOML, SERVERS_LIST).known

    add_or_update(path, TOML, SERVERS_LIST, ManagedEntry(key="temp", fields={"command": "npx"}))
    remove_entry(path, TOML, SERVERS_LIST, "temp")

    assert read_config(path, TOML, SERVERS_LIST).known == before


def test_remove_absent_entry_writes_nothing(tmp_path: Path) -> None:
    path = tmp_path / "mcp.json"
    path.write_text('{"mcpServers": {"a": {"command": "x"}}}', encoding="utf-8")

    assert not remove_entry(path, JSON, SERVERS_TABLE, "b")
    assert not remove_entry(tmp_path / "missing.json", JSON, SERVERS_TABLE, "a")

    assert path.read_text() == '{"mcpServers": {"a": {"command": "x"}}}'
    assert not (tmp_path / "missing.json").exists()


def test_verify_present_messages(tmp_path: Path) -> None:
    path = tmp_path / "mcp.json"

    assert verify_present(path, JSON, SERVERS_TABLE, "a") == (False, "mcp.json not found")

    path.write_text("[1, 2", encoding="utf-8")
    installed, message = verify_present(path, JSON, SERVERS_TABLE, "a")
    assert not installed
    assert message.startswith("failed to read mcp.json:")

    path.write_text('{"mcpServers": {}}', encoding="utf-8")
    assert verify_present(path, JSON, SERVERS_TABLE, "a") == (False, "MCP server not registered")

    add_or_update(path, JSON, SERVERS_TABLE, ManagedEntry(key="a", fields={"command": "x"}))
    assert verify_present(path, JSON, SERVERS_TABLE, "a") == (True, "installed")


def test_unexpected_section_shape_raises(tmp_path: Path) -> None:
    path = tmp_path / "mcp.json"
    path.write_text('{"mcpServers": ["not", "a", "map"]}', encoding="utf-8")

    with pytest.raises(NativeConfigError, match="expected 'mcpServers' to be a table"):
        add_or_update(path, JSON, SERVERS_TABLE, ManagedEntry(key="a", fields={"command": "x"}))
