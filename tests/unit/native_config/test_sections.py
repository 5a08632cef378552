"""Tests for managed sections: command arrays and hook lists."""

from sx.native_config.formats import JSON, TOML
from sx.native_config.sections import (
    CommandArray,
    HookEntryList,
    ManagedEntry,
    by_command,
    tagged_by,
)

OWNED = frozenset({"_artifact", "matcher", "hooks", "command", "timeout", "type"})


def _tagged(event: str) -> HookEntryList:
    return HookEntryList(
        root=("hooks",), event=event, identity=tagged_by("_artifact"), owned_fields=OWNED
    )


def test_command_array_identity_is_exact() -> None:
    section = CommandArray("notify", label="notify command")
    document = TOML.new_document()

    section.upsert(document, TOML, ManagedEntry(key=("sx", "report-usage")))

    assert section.current(document) == ("sx", "report-usage")
    assert not section.delete(document, ("sx", "report-usage", "--verbose"))
    assert section.delete(document, ("sx", "report-usage"))
    assert "notify" not in document


def test_command_array_ignores_non_string_values() -> None:
    section = CommandArray("notify", label="notify command")

    assert section.current({"notify": "sx report-usage"}) is None
    assert section.entries({"notify": [1, 2]}) == []


def test_hook_upsert_keeps_foreign_hooks_in_same_event() -> None:
    document = {
        "hooks": {
            "SessionStart": [{"hooks": [{"type": "command", "command": "echo user"}]}],
        }
    }

    _tagged("SessionStart").upsert(
        document, JSON, ManagedEntry(key="greet", fields={"_artifact": "greet", "command": "hi"})
    )

    entries = document["hooks"]["SessionStart"]
    assert entries[0] == {"hooks": [{"type": "command", "command": "echo user"}]}
    assert entries[1] == {"_artifact": "greet", "command": "hi"}


def test_hook_reinstall_with_new_event_moves_entry() -> None:
    document: dict = {}
    entry = ManagedEntry(key="greet", fields={"_artifact": "greet", "command": "hi"})

    _tagged("SessionStart").upsert(document, JSON, entry)
    _tagged("Stop").upsert(document, JSON, entry)

    assert document == {"hooks": {"Stop": [{"_artifact": "greet", "command": "hi"}]}}


def test_hook_delete_removes_tagged_entries_across_events() -> None:
    document = {
        "hooks": {
            "Stop": [{"_artifact": "greet", "command": "hi"}, {"command": "user"}],
            "SessionEnd": [{"_artifact": "greet", "command": "bye"}],
        }
    }

    assert _tagged("").delete(document, "greet")

    assert document == {"hooks": {"Stop": [{"command": "user"}]}}


def test_by_command_identity_for_nested_and_flat_entries() -> None:
    nested = by_command(nested=True)
    flat = by_command(nested=False)

    assert nested({"hooks": [{"type": "command", "command": "sx install"}]}) == "sx install"
    assert nested({"hooks": [{"command": "a"}, {"command": "b"}]}) is None
    assert flat({"command": "sx install"}) == "sx install"
