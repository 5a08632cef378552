"""Read-only views of assets found on disk."""

from dataclasses import dataclass
from pathlib import Path

from sx.assets.types import AssetType


@dataclass(frozen=True)
class InstalledAssetInfo:
    """An installed asset reconstructed from files and sidecar metadata.

    `version` is empty when no metadata was found next to the asset.
    """

    name: str
    description: str
    version: str
    asset_type: AssetType | None
    install_path: Path


@dataclass(frozen=True)
class SkillContent:
    """Prompt content of an installed skill, as returned by ReadSkill."""

    name: str
    description: str
    version: str
    content: str
    base_dir: Path
