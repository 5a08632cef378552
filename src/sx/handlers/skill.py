"""Skill handler: directory-tree assets with a prompt file."""

from pathlib import Path

from sx.assets.bundle import AssetBundle
from sx.assets.installed import InstalledAssetInfo
from sx.assets.metadata import Metadata
from sx.assets.types import Asset
from sx.core.cancellation import CancelToken
from sx.core.errors import AssetValidationError
from sx.handlers.dirasset import DirectoryAssetOps


class SkillHandler:
    def __init__(self, ops: DirectoryAssetOps) -> None:
        self._ops = ops

    def skip_reason(self, metadata: Metadata) -> str | None:
        return None

    def install(self, bundle: AssetBundle, target_base: Path, cancel: CancelToken) -> None:
        prompt_file = bundle.metadata.prompt_file
        if prompt_file is not None and not bundle.archive.contains(prompt_file):
            raise AssetValidationError(f"prompt file not found: {prompt_file}")
        self._ops.install(bundle.archive, bundle.name, target_base, cancel)

    def remove(self, asset: Asset, target_base: Path) -> bool:
        return self._ops.remove(asset.name, target_base)

    def verify(self, asset: Asset, target_base: Path) -> tuple[bool, str]:
        return self._ops.verify_installed(target_base, asset.name, asset.version)

    def scan(self, target_base: Path) -> list[InstalledAssetInfo]:
        return self._ops.scan_installed(target_base)

    def asset_path(self, name: str, target_base: Path) -> Path:
        return self._ops.install_dir(target_base, name)
