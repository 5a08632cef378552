"""Real SxInstallation implementation backed by ~/.sx/."""

import tomllib
from pathlib import Path

import tomlkit
from tomlkit.items import Table

from sx.config.abc import SxInstallation
from sx.config.types import SxConfig
from sx.core.errors import UserConfigError

CONFIG_FILE = "config.toml"
ENABLED_CLIENTS_KEY = "enabled-clients"
BOOTSTRAP_KEY = "bootstrap"


def default_root() -> Path:
    """Return ~/.sx.

    Not cached so tests can monkeypatch Path.home().
    """
    return Path.home() / ".sx"


def parse_config(content: str, source: Path) -> SxConfig:
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise UserConfigError(f"failed to parse {source}: {e}") from e

    enabled = data.get(ENABLED_CLIENTS_KEY, [])
    if not isinstance(enabled, list) or not all(isinstance(item, str) for item in enabled):
        raise UserConfigError(f"'{ENABLED_CLIENTS_KEY}' in {source} must be a list of strings")

    bootstrap = data.get(BOOTSTRAP_KEY, {})
    if not isinstance(bootstrap, dict):
        raise UserConfigError(f"'{BOOTSTRAP_KEY}' in {source} must be a table")
    choices: dict[str, bool] = {}
    for key, value in bootstrap.items():
        if not isinstance(value, bool):
            raise UserConfigError(f"'{BOOTSTRAP_KEY}.{key}' in {source} must be true or false")
        choices[key] = value

    return SxConfig(enabled_clients=tuple(enabled), bootstrap=choices)


class RealSxInstallation(SxInstallation):
    """Production implementation that reads and writes the sx directory."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def config_path(self) -> Path:
        return self._root / CONFIG_FILE

    def config_exists(self) -> bool:
        return self.config_path().exists()

    def load_config(self) -> SxConfig:
        path = self.config_path()
        if not path.exists():
            return SxConfig()
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise UserConfigError(f"failed to parse {path}: {e}") from e
        return parse_config(content, path)

    def save_config(self, config: SxConfig) -> None:
        path = self.config_path()
        if path.exists():
            doc = tomlkit.parse(path.read_text(encoding="utf-8"))
        else:
            doc = tomlkit.document()
            doc.add(tomlkit.comment("sx user configuration"))

        if config.enabled_clients:
            doc[ENABLED_CLIENTS_KEY] = list(config.enabled_clients)
        elif ENABLED_CLIENTS_KEY in doc:
            del doc[ENABLED_CLIENTS_KEY]

        if config.bootstrap:
            if BOOTSTRAP_KEY not in doc:
                doc[BOOTSTRAP_KEY] = tomlkit.table()
            table = doc[BOOTSTRAP_KEY]
            if not isinstance(table, Table):
                raise UserConfigError(f"'{BOOTSTRAP_KEY}' in {path} must be a table")
            for key, value in config.bootstrap.items():
                if table.get(key) != value:
                    table[key] = value

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(tomlkit.dumps(doc), encoding="utf-8")

    def cache_dir(self) -> Path:
        return self._root / "cache"
