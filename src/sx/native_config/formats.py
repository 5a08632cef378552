"""File formats for native config documents.

JSON documents round-trip through the stdlib json module (key order is kept).
TOML documents round-trip through tomlkit so comments and layout survive.
"""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, MutableMapping, MutableSequence
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from sx.core.errors import NativeConfigError

logger = logging.getLogger(__name__)


class ConfigFormat(ABC):
    """Parse, serialize and build containers for one document format."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def parse(self, text: str, path: Path) -> MutableMapping[str, Any]:
        """Parse document text.

        Raises:
            NativeConfigError: If the text is not a valid document
        """
        ...

    @abstractmethod
    def serialize(self, document: MutableMapping[str, Any]) -> str: ...

    @abstractmethod
    def new_document(self) -> MutableMapping[str, Any]: ...

    @abstractmethod
    def new_table(self) -> MutableMapping[str, Any]: ...

    @abstractmethod
    def new_table_list(self) -> MutableSequence[Any]: ...

    @abstractmethod
    def native(self, value: object) -> Any:
        """Convert a plain value into this format's container types."""
        ...

    def load(self, path: Path) -> MutableMapping[str, Any]:
        """Load a document; a missing or blank file is an empty document."""
        if not path.exists():
            return self.new_document()
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise NativeConfigError(f"failed to read {path.name}: {e}") from e
        if not text.strip():
            return self.new_document()
        return self.parse(text, path)

    def save(self, path: Path, document: MutableMapping[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.serialize(document), encoding="utf-8")
        logger.debug("Wrote %s", path)


class JsonFormat(ConfigFormat):
    @property
    def name(self) -> str:
        return "json"

    def parse(self, text: str, path: Path) -> MutableMapping[str, Any]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise NativeConfigError(f"failed to parse {path.name}: {e}") from e
        if not isinstance(data, dict):
            raise NativeConfigError(f"failed to parse {path.name}: top level is not an object")
        return data

    def serialize(self, document: MutableMapping[str, Any]) -> str:
        return json.dumps(document, indent=2, ensure_ascii=False) + "\n"

    def new_document(self) -> MutableMapping[str, Any]:
        return {}

    def new_table(self) -> MutableMapping[str, Any]:
        return {}

    def new_table_list(self) -> MutableSequence[Any]:
        return []

    def native(self, value: object) -> Any:
        if isinstance(value, Mapping):
            return {str(k): self.native(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self.native(item) for item in value]
        return value


class TomlFormat(ConfigFormat):
    @property
    def name(self) -> str:
        return "toml"

    def parse(self, text: str, path: Path) -> MutableMapping[str, Any]:
        try:
            return tomlkit.parse(text)
        except TOMLKitError as e:
            raise NativeConfigError(f"failed to parse {path.name}: {e}") from e

    def serialize(self, document: MutableMapping[str, Any]) -> str:
        return tomlkit.dumps(document)

    def new_document(self) -> MutableMapping[str, Any]:
        return tomlkit.document()

    def new_table(self) -> MutableMapping[str, Any]:
        return tomlkit.table()

    def new_table_list(self) -> MutableSequence[Any]:
        return tomlkit.aot()

    def native(self, value: object) -> Any:
        # Nested maps stay inline so they render inside their parent entry
        if isinstance(value, Mapping):
            table = tomlkit.inline_table()
            for key, item in value.items():
                table[str(key)] = self.native(item)
            return table
        if isinstance(value, (list, tuple)):
            return [self.native(item) for item in value]
        return value


JSON = JsonFormat()
TOML = TomlFormat()
