"""Asset bundles: an asset identity plus its archive and parsed metadata."""

from dataclasses import dataclass
from pathlib import Path

from sx.assets.archive import AssetArchive
from sx.assets.metadata import Metadata
from sx.assets.types import Asset


@dataclass(frozen=True)
class AssetBundle:
    """A resolved asset ready to install.

    Bundles come from the resolution layer already paired with their payload;
    the orchestrator holds them for the duration of one install call.
    """

    asset: Asset
    archive: AssetArchive
    metadata: Metadata

    @property
    def name(self) -> str:
        return self.asset.name


def bundle_from_archive(archive: AssetArchive) -> AssetBundle:
    """Build a bundle whose identity is taken from the archive's metadata.

    Raises:
        AssetValidationError: If metadata.toml is missing or invalid
    """
    metadata = archive.read_metadata()
    asset = Asset(name=metadata.name, version=metadata.version, asset_type=metadata.asset_type)
    return AssetBundle(asset=asset, archive=archive, metadata=metadata)


def load_bundle(path: Path) -> AssetBundle:
    """Load a bundle from a local zip file."""
    return bundle_from_archive(AssetArchive.from_path(path))
