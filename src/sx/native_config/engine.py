"""Read-modify-write of native config documents.

A ConfigDocument pairs the typed view of one managed section with the raw
document it was read from. Writes go through a ManagedSection, which edits
the raw document in place; the file is then re-serialized from that raw
document, so foreign keys and unrelated array entries come back unchanged.
"""

import logging
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sx.core.errors import NativeConfigError
from sx.native_config.formats import ConfigFormat
from sx.native_config.sections import EntryKey, ManagedEntry, ManagedSection
from sx.native_config.values import ConfigValue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigDocument:
    """A parsed native config file.

    Attributes:
        known: Engine-owned entries of the requested section, decoded from raw
        raw: The full document, including everything the engine does not own
    """

    known: tuple[ManagedEntry, ...]
    raw: MutableMapping[str, Any]


def read_config(path: Path, fmt: ConfigFormat, section: ManagedSection) -> ConfigDocument:
    """Read a config file. A missing file is an empty document.

    Raises:
        NativeConfigError: If the file exists but cannot be parsed, or the
            managed section has an unexpected shape
    """
    raw = fmt.load(path)
    return ConfigDocument(known=tuple(section.entries(raw)), raw=raw)


def add_or_update(
    path: Path,
    fmt: ConfigFormat,
    section: ManagedSection,
    entry: ManagedEntry,
    defaults: Mapping[str, ConfigValue] | None = None,
) -> None:
    """Insert an entry, or update the entry with the same identity in place.

    `defaults` are top-level keys written only when the document lacks them
    (e.g. the `version` field of a Cursor hooks.json).

    Raises:
        NativeConfigError: If the existing file cannot be parsed
        OSError: If the file cannot be written
    """
    raw = fmt.load(path)
    if defaults is not None:
        for key, value in defaults.items():
            if key not in raw:
                raw[key] = fmt.native(value)
    section.upsert(raw, fmt, entry)
    fmt.save(path, raw)
    logger.debug("Registered %s %s in %s", section.label, entry.key, path)


def remove_entry(path: Path, fmt: ConfigFormat, section: ManagedSection, key: EntryKey) -> bool:
    """Remove the entry whose identity exactly matches `key`.

    A missing file or missing entry is a no-op and nothing is written.

    Returns:
        True if an entry was removed
    """
    if not path.exists():
        return False
    raw = fmt.load(path)
    if not section.delete(raw, key):
        return False
    fmt.save(path, raw)
    logger.debug("Removed %s %s from %s", section.label, key, path)
    return True


def verify_present(
    path: Path, fmt: ConfigFormat, section: ManagedSection, key: EntryKey
) -> tuple[bool, str]:
    """Check whether an entry is registered. Never raises."""
    if not path.exists():
        return False, f"{path.name} not found"
    try:
        raw = fmt.load(path)
        present = section.contains(raw, key)
    except NativeConfigError as e:
        return False, f"failed to read {path.name}: {e}"
    if not present:
        return False, f"{section.label} not registered"
    return True, "installed"
