"""Engine-owned sections inside native config documents.

A section knows where its entries live in a raw document and how to tell
entries apart. Every mutation edits the raw document in place, so keys and
array entries the section does not own are never rebuilt or dropped.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping, MutableMapping, MutableSequence
from dataclasses import dataclass, field
from typing import Any

from sx.core.errors import NativeConfigError
from sx.native_config.formats import ConfigFormat
from sx.native_config.values import ConfigValue, as_str, as_str_list, as_table, as_table_list

EntryKey = str | tuple[str, ...]


@dataclass(frozen=True)
class ManagedEntry:
    """One engine-owned entry.

    Attributes:
        key: Identity within its section (a name, an ownership tag, or for
            single-array settings the array itself)
        fields: Owned fields to write; identity fields are added by the section
    """

    key: EntryKey
    fields: Mapping[str, ConfigValue] = field(default_factory=dict)


def _apply_owned_fields(
    target: MutableMapping[str, Any],
    fields: Mapping[str, ConfigValue],
    owned_fields: frozenset[str],
    fmt: ConfigFormat,
) -> None:
    """Overwrite owned fields on an existing entry, keeping foreign ones."""
    for name in owned_fields:
        if name not in fields and name in target:
            del target[name]
    for name, value in fields.items():
        target[name] = fmt.native(value)


def _walk(
    document: MutableMapping[str, Any], path: tuple[str, ...], fmt: ConfigFormat | None
) -> MutableMapping[str, Any] | None:
    """Descend into nested tables; missing tables are created only when `fmt` is given."""
    current = document
    for part in path:
        child = current.get(part)
        if child is None:
            if fmt is None:
                return None
            current[part] = fmt.new_table()
            child = current[part]
        table = as_table(child)
        if table is None:
            raise NativeConfigError(f"expected '{part}' to be a table")
        current = table
    return current


class ManagedSection(ABC):
    """A region of a document whose entries this engine owns."""

    @property
    @abstractmethod
    def label(self) -> str:
        """Human-readable entry kind used in diagnostics (e.g. "MCP server")."""
        ...

    @abstractmethod
    def entries(self, document: MutableMapping[str, Any]) -> list[ManagedEntry]: ...

    @abstractmethod
    def upsert(
        self, document: MutableMapping[str, Any], fmt: ConfigFormat, entry: ManagedEntry
    ) -> None: ...

    @abstractmethod
    def delete(self, document: MutableMapping[str, Any], key: EntryKey) -> bool: ...

    def contains(self, document: MutableMapping[str, Any], key: EntryKey) -> bool:
        return any(entry.key == key for entry in self.entries(document))


class NamedEntryList(ManagedSection):
    """Array of tables identified by a name field, e.g. Codex `[[mcp]]`."""

    def __init__(
        self,
        list_key: str,
        owned_fields: frozenset[str],
        label: str,
        name_field: str = "name",
    ) -> None:
        self._list_key = list_key
        self._owned_fields = owned_fields
        self._label = label
        self._name_field = name_field

    @property
    def label(self) -> str:
        return self._label

    def _items(self, document: MutableMapping[str, Any]) -> MutableSequence[Any] | None:
        raw = document.get(self._list_key)
        if raw is None:
            return None
        items = as_table_list(raw)
        if items is None:
            raise NativeConfigError(f"expected '{self._list_key}' to be an array of tables")
        return items

    def _index_of(self, items: MutableSequence[Any], key: EntryKey) -> int | None:
        for index, item in enumerate(items):
            table = as_table(item)
            if table is not None and as_str(table.get(self._name_field)) == key:
                return index
        return None

    def entries(self, document: MutableMapping[str, Any]) -> list[ManagedEntry]:
        items = self._items(document)
        if items is None:
            return []
        result = []
        for item in items:
            table = as_table(item)
            if table is None:
                continue
            name = as_str(table.get(self._name_field))
            if name is None:
                continue
            fields = {k: v for k, v in table.items() if k != self._name_field}
            result.append(ManagedEntry(key=name, fields=fields))
        return result

    def upsert(
        self, document: MutableMapping[str, Any], fmt: ConfigFormat, entry: ManagedEntry
    ) -> None:
        items = self._items(document)
        if items is None:
            document[self._list_key] = fmt.new_table_list()
            items = as_table_list(document[self._list_key])
            assert items is not None

        index = self._index_of(items, entry.key)
        if index is not None:
            _apply_owned_fields(items[index], entry.fields, self._owned_fields, fmt)
            return

        table = fmt.new_table()
        table[self._name_field] = entry.key
        for name, value in entry.fields.items():
            table[name] = fmt.native(value)
        items.append(table)

    def delete(self, document: MutableMapping[str, Any], key: EntryKey) -> bool:
        items = self._items(document)
        if items is None:
            return False
        index = self._index_of(items, key)
        if index is None:
            return False
        del items[index]
        if len(items) == 0:
            del document[self._list_key]
        return True


class NamedEntryTable(ManagedSection):
    """Map of entries keyed by name, e.g. JSON `mcpServers`."""

    def __init__(self, path: tuple[str, ...], owned_fields: frozenset[str], label: str) -> None:
        self._path = path
        self._owned_fields = owned_fields
        self._label = label

    @property
    def label(self) -> str:
        return self._label

    def entries(self, document: MutableMapping[str, Any]) -> list[ManagedEntry]:
        table = _walk(document, self._path, fmt=None)
        if table is None:
            return []
        result = []
        for name, value in table.items():
            entry_table = as_table(value)
            if entry_table is not None:
                result.append(ManagedEntry(key=str(name), fields=dict(entry_table)))
        return result

    def upsert(
        self, document: MutableMapping[str, Any], fmt: ConfigFormat, entry: ManagedEntry
    ) -> None:
        table = _walk(document, self._path, fmt=fmt)
        assert table is not None
        assert isinstance(entry.key, str)
        existing = as_table(table.get(entry.key))
        if existing is not None:
            _apply_owned_fields(existing, entry.fields, self._owned_fields, fmt)
            return
        new_entry = fmt.new_table()
        for name, value in entry.fields.items():
            new_entry[name] = fmt.native(value)
        table[entry.key] = new_entry

    def delete(self, document: MutableMapping[str, Any], key: EntryKey) -> bool:
        table = _walk(document, self._path, fmt=None)
        if table is None or not isinstance(key, str) or key not in table:
            return False
        del table[key]
        return True


class CommandArray(ManagedSection):
    """A single array-valued setting owned as a whole, e.g. Codex `notify`.

    Identity is exact value-array equality: an array that differs in any
    element is not recognized as ours.
    """

    def __init__(self, key: str, label: str) -> None:
        self._key = key
        self._label = label

    @property
    def label(self) -> str:
        return self._label

    def current(self, document: MutableMapping[str, Any]) -> tuple[str, ...] | None:
        """Return the setting's value, or None if absent or not a string array."""
        if self._key not in document:
            return None
        values = as_str_list(document[self._key])
        if values is None:
            return None
        return tuple(values)

    def entries(self, document: MutableMapping[str, Any]) -> list[ManagedEntry]:
        value = self.current(document)
        if value is None:
            return []
        return [ManagedEntry(key=value)]

    def upsert(
        self, document: MutableMapping[str, Any], fmt: ConfigFormat, entry: ManagedEntry
    ) -> None:
        assert isinstance(entry.key, tuple)
        document[self._key] = fmt.native(list(entry.key))

    def delete(self, document: MutableMapping[str, Any], key: EntryKey) -> bool:
        if self.current(document) != key:
            return False
        del document[self._key]
        return True


HookIdentity = Callable[[Mapping[str, Any]], str | None]


def tagged_by(tag_field: str) -> HookIdentity:
    """Identify hook entries by an ownership tag field (e.g. `_artifact`)."""

    def identity(entry: Mapping[str, Any]) -> str | None:
        return as_str(entry.get(tag_field))

    return identity


def by_command(nested: bool) -> HookIdentity:
    """Identify hook entries by their exact command string.

    Args:
        nested: Entries are matcher groups holding a single-element `hooks`
            list (Claude Code, Gemini) rather than flat command entries (Cursor)
    """

    def identity(entry: Mapping[str, Any]) -> str | None:
        if not nested:
            return as_str(entry.get("command"))
        inner = as_table_list(entry.get("hooks"))
        if inner is None or len(inner) != 1:
            return None
        hook = as_table(inner[0])
        if hook is None:
            return None
        return as_str(hook.get("command"))

    return identity


class HookEntryList(ManagedSection):
    """Hook entries grouped by native event name under a root table.

    Layout: `{root...: {EventName: [entry, ...]}}`. Identity is computed by
    `identity` and is unique across all events, so re-installing a hook whose
    event changed moves it instead of duplicating it.
    """

    def __init__(
        self,
        root: tuple[str, ...],
        event: str,
        identity: HookIdentity,
        owned_fields: frozenset[str],
        label: str = "hook",
    ) -> None:
        self._root = root
        self._event = event
        self._identity = identity
        self._owned_fields = owned_fields
        self._label = label

    @property
    def label(self) -> str:
        return self._label

    def _event_lists(
        self, document: MutableMapping[str, Any]
    ) -> Iterator[tuple[str, MutableSequence[Any]]]:
        root = _walk(document, self._root, fmt=None)
        if root is None:
            return
        for event_name, value in list(root.items()):
            items = as_table_list(value)
            if items is not None:
                yield str(event_name), items

    def entries(self, document: MutableMapping[str, Any]) -> list[ManagedEntry]:
        result = []
        for _event_name, items in self._event_lists(document):
            for item in items:
                table = as_table(item)
                if table is None:
                    continue
                key = self._identity(table)
                if key is not None:
                    result.append(ManagedEntry(key=key, fields=dict(table)))
        return result

    def upsert(
        self, document: MutableMapping[str, Any], fmt: ConfigFormat, entry: ManagedEntry
    ) -> None:
        for event_name, items in self._event_lists(document):
            if event_name == self._event:
                continue
            self._remove_from(document, event_name, items, entry.key)

        root = _walk(document, self._root, fmt=fmt)
        assert root is not None
        if self._event not in root:
            root[self._event] = fmt.new_table_list()
        items = as_table_list(root[self._event])
        if items is None:
            raise NativeConfigError(f"expected hooks for '{self._event}' to be an array")

        for item in items:
            table = as_table(item)
            if table is not None and self._identity(table) == entry.key:
                _apply_owned_fields(table, entry.fields, self._owned_fields, fmt)
                return

        new_entry = fmt.new_table()
        for name, value in entry.fields.items():
            new_entry[name] = fmt.native(value)
        items.append(new_entry)

    def _remove_from(
        self,
        document: MutableMapping[str, Any],
        event_name: str,
        items: MutableSequence[Any],
        key: EntryKey,
    ) -> bool:
        removed = False
        for index in reversed(range(len(items))):
            table = as_table(items[index])
            if table is not None and self._identity(table) == key:
                del items[index]
                removed = True
        if removed and len(items) == 0:
            root = _walk(document, self._root, fmt=None)
            assert root is not None
            del root[event_name]
        return removed

    def delete(self, document: MutableMapping[str, Any], key: EntryKey) -> bool:
        removed = False
        for event_name, items in self._event_lists(document):
            if self._remove_from(document, event_name, items, key):
                removed = True
        return removed

