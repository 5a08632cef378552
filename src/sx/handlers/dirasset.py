"""Install, remove, scan and verify directory-tree assets.

A directory-tree asset (skills, packaged MCP servers, hook scripts) is the
archive's full file tree extracted to `{target_base}/{subdir}/{name}/`. The
extracted metadata.toml doubles as version bookkeeping.
"""

import logging
import shutil
from pathlib import Path

from sx.assets.archive import AssetArchive
from sx.assets.installed import InstalledAssetInfo, SkillContent
from sx.assets.metadata import METADATA_FILE, Metadata, parse_metadata
from sx.assets.types import AssetType
from sx.core.cancellation import CancelToken
from sx.core.errors import AssetValidationError

logger = logging.getLogger(__name__)


def read_installed_metadata(directory: Path) -> Metadata | None:
    """Parse `directory/metadata.toml`, or return None if absent or invalid."""
    metadata_path = directory / METADATA_FILE
    if not metadata_path.is_file():
        return None
    try:
        return parse_metadata(metadata_path.read_bytes())
    except AssetValidationError as e:
        logger.debug("Ignoring %s: %s", metadata_path, e)
        return None


class DirectoryAssetOps:
    """Operations for assets installed as a directory under `subdir`."""

    def __init__(self, subdir: str, expected_type: AssetType | None) -> None:
        self._subdir = subdir
        self._expected_type = expected_type

    @property
    def subdir(self) -> str:
        return self._subdir

    def install_dir(self, target_base: Path, name: str) -> Path:
        return target_base / self._subdir / name

    def install(
        self, archive: AssetArchive, name: str, target_base: Path, cancel: CancelToken
    ) -> Path:
        """Replace any existing install with the archive's full tree."""
        install_dir = self.install_dir(target_base, name)
        if install_dir.exists():
            shutil.rmtree(install_dir)
        archive.extract_to(install_dir, cancel)
        logger.debug("Installed %s to %s", name, install_dir)
        return install_dir

    def remove(self, name: str, target_base: Path) -> bool:
        """Delete the asset directory. A missing directory is not an error.

        Returns:
            True if a directory was deleted
        """
        install_dir = self.install_dir(target_base, name)
        if not install_dir.exists():
            return False
        shutil.rmtree(install_dir)
        logger.debug("Removed %s", install_dir)
        return True

    def scan_installed(self, target_base: Path) -> list[InstalledAssetInfo]:
        """List managed assets; directories without valid metadata are skipped."""
        root = target_base / self._subdir
        if not root.is_dir():
            return []

        found: list[InstalledAssetInfo] = []
        for entry in sorted(root.iterdir()):
            if not entry.is_dir():
                continue
            metadata = read_installed_metadata(entry)
            if metadata is None:
                continue
            if self._expected_type is not None and metadata.asset_type != self._expected_type:
                continue
            found.append(
                InstalledAssetInfo(
                    name=metadata.name,
                    description=metadata.asset.description,
                    version=metadata.version,
                    asset_type=metadata.asset_type,
                    install_path=entry,
                )
            )
        return found

    def verify_installed(self, target_base: Path, name: str, version: str) -> tuple[bool, str]:
        install_dir = self.install_dir(target_base, name)
        if not install_dir.is_dir():
            return False, "directory not found"
        if not (install_dir / METADATA_FILE).is_file():
            return False, f"{METADATA_FILE} not found"
        metadata = read_installed_metadata(install_dir)
        if metadata is None:
            return False, f"invalid {METADATA_FILE}"
        if metadata.version != version:
            return False, f"version mismatch: installed {metadata.version}, expected {version}"
        return True, "installed"

    def read_prompt_content(self, target_base: Path, name: str) -> SkillContent | None:
        """Read the prompt file of an installed asset, or None if not installed."""
        install_dir = self.install_dir(target_base, name)
        metadata = read_installed_metadata(install_dir)
        if metadata is None:
            return None
        prompt_file = metadata.prompt_file
        if prompt_file is None:
            return None
        prompt_path = install_dir / prompt_file
        if not prompt_path.is_file():
            return None
        return SkillContent(
            name=metadata.name,
            description=metadata.asset.description,
            version=metadata.version,
            content=prompt_path.read_text(encoding="utf-8"),
            base_dir=install_dir,
        )
