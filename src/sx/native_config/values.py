"""Checked accessors for untyped values read from native config documents.

Parsed JSON and TOML arrive as nested dicts and lists of unknown shape.
Business logic never indexes into them directly; it converts through these
helpers, which return None when the shape is not what was asked for.
"""

from collections.abc import Mapping, MutableMapping, MutableSequence
from typing import Any, TypeAlias

ConfigValue: TypeAlias = (
    str | int | float | bool | None | list["ConfigValue"] | dict[str, "ConfigValue"]
)


def as_str(value: object) -> str | None:
    if isinstance(value, str):
        return str(value)
    return None


def as_str_list(value: object) -> list[str] | None:
    if not isinstance(value, list):
        return None
    if not all(isinstance(item, str) for item in value):
        return None
    return [str(item) for item in value]


def as_str_map(value: object) -> dict[str, str] | None:
    if not isinstance(value, Mapping):
        return None
    if not all(isinstance(v, str) for v in value.values()):
        return None
    return {str(k): str(v) for k, v in value.items()}


def as_table(value: object) -> MutableMapping[str, Any] | None:
    if isinstance(value, MutableMapping):
        return value
    return None


def as_table_list(value: object) -> MutableSequence[Any] | None:
    if isinstance(value, MutableSequence) and not isinstance(value, str):
        return value
    return None
