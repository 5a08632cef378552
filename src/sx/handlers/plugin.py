"""Claude Code plugin handler.

A plugin archive is extracted to `{target_base}/plugins/{name}/` and
registered in two Claude Code files under the same base:

- `plugins/installed_plugins.json`, keyed by `name` or `name@marketplace`
- `settings.json` `enabledPlugins`, unless the asset sets auto-enable = false

Only those keys are touched; everything else in either file is kept.
"""

import logging
from collections.abc import MutableMapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from sx.assets.bundle import AssetBundle
from sx.assets.installed import InstalledAssetInfo
from sx.assets.metadata import Metadata, PluginSection
from sx.assets.types import CLAUDE_CODE_PLUGIN, Asset
from sx.core.cancellation import CancelToken
from sx.core.errors import AssetValidationError, NativeConfigError
from sx.handlers.dirasset import DirectoryAssetOps, read_installed_metadata
from sx.native_config.formats import JSON

logger = logging.getLogger(__name__)

PLUGINS_DIR = "plugins"
INSTALLED_PLUGINS_FILE = "installed_plugins.json"
INSTALLED_PLUGINS_VERSION = 2
ENABLED_PLUGINS_KEY = "enabledPlugins"


def plugin_key(name: str, marketplace: str) -> str:
    if marketplace:
        return f"{name}@{marketplace}"
    return name


def _child_table(
    document: MutableMapping[str, Any], key: str, path: Path
) -> MutableMapping[str, Any]:
    table = document.setdefault(key, {})
    if not isinstance(table, dict):
        raise NativeConfigError(f"'{key}' in {path.name} is not an object")
    return table


class PluginHandler:
    def __init__(self, settings_path: Path) -> None:
        self._settings_path = settings_path
        self._ops = DirectoryAssetOps(PLUGINS_DIR, CLAUDE_CODE_PLUGIN)

    def skip_reason(self, metadata: Metadata) -> str | None:
        return None

    def _registry_path(self, target_base: Path) -> Path:
        return target_base / PLUGINS_DIR / INSTALLED_PLUGINS_FILE

    def install(self, bundle: AssetBundle, target_base: Path, cancel: CancelToken) -> None:
        section = bundle.metadata.plugin or PluginSection()
        if not bundle.archive.contains(section.manifest_file):
            raise AssetValidationError(f"plugin manifest not found: {section.manifest_file}")

        install_dir = self._ops.install(bundle.archive, bundle.name, target_base, cancel)
        key = plugin_key(bundle.name, section.marketplace)

        registry_path = self._registry_path(target_base)
        registry = JSON.load(registry_path)
        registry.setdefault("version", INSTALLED_PLUGINS_VERSION)
        now = datetime.now(UTC).isoformat()
        _child_table(registry, "plugins", registry_path)[key] = [
            {
                "scope": "user",
                "installPath": str(install_dir),
                "version": bundle.asset.version,
                "installedAt": now,
                "lastUpdated": now,
                "isLocal": not section.marketplace,
            }
        ]
        JSON.save(registry_path, registry)

        if section.auto_enable:
            settings = JSON.load(self._settings_path)
            _child_table(settings, ENABLED_PLUGINS_KEY, self._settings_path)[key] = True
            JSON.save(self._settings_path, settings)
        logger.debug("Registered plugin %s in %s", key, registry_path)

    def _installed_key(self, asset: Asset, target_base: Path) -> str:
        """Registry key of an installed plugin, read back from its metadata."""
        metadata = read_installed_metadata(self._ops.install_dir(target_base, asset.name))
        marketplace = ""
        if metadata is not None and metadata.plugin is not None:
            marketplace = metadata.plugin.marketplace
        return plugin_key(asset.name, marketplace)

    def remove(self, asset: Asset, target_base: Path) -> bool:
        key = self._installed_key(asset, target_base)
        unregistered = False

        registry_path = self._registry_path(target_base)
        if registry_path.exists():
            registry = JSON.load(registry_path)
            plugins = registry.get("plugins")
            if isinstance(plugins, dict) and key in plugins:
                del plugins[key]
                JSON.save(registry_path, registry)
                unregistered = True

        if self._settings_path.exists():
            settings = JSON.load(self._settings_path)
            enabled = settings.get(ENABLED_PLUGINS_KEY)
            if isinstance(enabled, dict) and key in enabled:
                del enabled[key]
                JSON.save(self._settings_path, settings)

        removed_dir = self._ops.remove(asset.name, target_base)
        return unregistered or removed_dir

    def verify(self, asset: Asset, target_base: Path) -> tuple[bool, str]:
        return self._ops.verify_installed(target_base, asset.name, asset.version)

    def scan(self, target_base: Path) -> list[InstalledAssetInfo]:
        return self._ops.scan_installed(target_base)

    def asset_path(self, name: str, target_base: Path) -> Path:
        return self._ops.install_dir(target_base, name)
