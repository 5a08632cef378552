"""Structural interface shared by the per-type asset handlers."""

from pathlib import Path
from typing import Protocol

from sx.assets.bundle import AssetBundle
from sx.assets.installed import InstalledAssetInfo
from sx.assets.metadata import Metadata
from sx.assets.types import Asset
from sx.core.cancellation import CancelToken


class AssetHandler(Protocol):
    """Install/remove/verify logic for one asset type on one client.

    Handlers raise on failure (SxError subclasses or OSError); the client
    batch loop turns exceptions into per-asset Failed results.
    """

    def skip_reason(self, metadata: Metadata) -> str | None:
        """Return why this asset cannot be installed here, or None."""
        ...

    def install(self, bundle: AssetBundle, target_base: Path, cancel: CancelToken) -> None: ...

    def remove(self, asset: Asset, target_base: Path) -> bool:
        """Remove the asset; return True if anything was deleted."""
        ...

    def verify(self, asset: Asset, target_base: Path) -> tuple[bool, str]: ...

    def scan(self, target_base: Path) -> list[InstalledAssetInfo]: ...

    def asset_path(self, name: str, target_base: Path) -> Path:
        """Where the named asset lives (file or directory) under `target_base`."""
        ...
