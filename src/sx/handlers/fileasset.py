"""Install, remove, scan and verify single-file assets.

A single-file asset (commands, agents, rules) is one prompt file extracted
to `{target_base}/{subdir}/{name}{suffix}`. A sidecar `{name}-metadata.toml`
next to it records the installed version; the asset works without it, but
verification is only precise when it is present.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from sx.assets.archive import AssetArchive
from sx.assets.installed import InstalledAssetInfo
from sx.assets.metadata import METADATA_FILE, Metadata, parse_metadata
from sx.assets.types import AssetType
from sx.core.errors import AssetValidationError

logger = logging.getLogger(__name__)

SIDECAR_SUFFIX = "-metadata.toml"

PromptRenderer = Callable[[str], str]


def sidecar_name(name: str) -> str:
    return f"{name}{SIDECAR_SUFFIX}"


class FileAssetOps:
    """Operations for assets installed as a single file under `subdir`."""

    def __init__(self, subdir: str, expected_type: AssetType | None, suffix: str = ".md") -> None:
        self._subdir = subdir
        self._expected_type = expected_type
        self._suffix = suffix

    @property
    def subdir(self) -> str:
        return self._subdir

    def file_path(self, target_base: Path, name: str) -> Path:
        return target_base / self._subdir / f"{name}{self._suffix}"

    def sidecar_path(self, target_base: Path, name: str) -> Path:
        return target_base / self._subdir / sidecar_name(name)

    def install(
        self,
        archive: AssetArchive,
        metadata: Metadata,
        target_base: Path,
        prompt_file: str,
        render: PromptRenderer | None = None,
    ) -> Path:
        """Write the prompt file and its sidecar.

        Raises:
            AssetValidationError: If `prompt_file` is not in the archive, or the
                target file belongs to another asset type
        """
        if not archive.contains(prompt_file):
            raise AssetValidationError(f"prompt file not found: {prompt_file}")
        other = self._other_type(target_base, metadata.name)
        if other is not None:
            filename = self.file_path(target_base, metadata.name).name
            raise AssetValidationError(f"{filename} is already installed as a {other.key} asset")
        content = archive.read_text(prompt_file)
        if render is not None:
            content = render(content)

        target = self.file_path(target_base, metadata.name)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

        sidecar = self.sidecar_path(target_base, metadata.name)
        sidecar.write_bytes(archive.read_file(METADATA_FILE))
        logger.debug("Installed %s to %s", metadata.name, target)
        return target

    def remove(self, name: str, target_base: Path) -> bool:
        """Delete the file; always try to delete the sidecar too.

        A file whose sidecar records another asset type is left alone.

        Returns:
            True if the asset file was deleted
        """
        if self._other_type(target_base, name) is not None:
            logger.debug("Not removing %s: it belongs to another asset type", name)
            return False
        target = self.file_path(target_base, name)
        removed = False
        if target.exists():
            target.unlink()
            removed = True

        sidecar = self.sidecar_path(target_base, name)
        if sidecar.exists():
            try:
                sidecar.unlink()
            except OSError as e:
                logger.debug("Could not remove sidecar %s: %s", sidecar, e)
        return removed

    def _read_sidecar(self, target_base: Path, name: str) -> Metadata | None:
        sidecar = self.sidecar_path(target_base, name)
        if not sidecar.is_file():
            return None
        try:
            return parse_metadata(sidecar.read_bytes())
        except AssetValidationError as e:
            logger.debug("Ignoring sidecar %s: %s", sidecar, e)
            return None

    def _other_type(self, target_base: Path, name: str) -> AssetType | None:
        """Type recorded for `name` when another asset type owns that file."""
        if self._expected_type is None:
            return None
        metadata = self._read_sidecar(target_base, name)
        if metadata is None or metadata.asset_type == self._expected_type:
            return None
        return metadata.asset_type

    def scan_installed(self, target_base: Path) -> list[InstalledAssetInfo]:
        """List installed files, skipping sidecars and other asset types."""
        root = target_base / self._subdir
        if not root.is_dir():
            return []

        found: list[InstalledAssetInfo] = []
        for entry in sorted(root.iterdir()):
            if not entry.is_file() or entry.name.endswith(SIDECAR_SUFFIX):
                continue
            if not entry.name.endswith(self._suffix):
                continue
            name = entry.name[: -len(self._suffix)]
            metadata = self._read_sidecar(target_base, name)
            if metadata is None:
                found.append(
                    InstalledAssetInfo(
                        name=name,
                        description="",
                        version="",
                        asset_type=self._expected_type,
                        install_path=entry,
                    )
                )
                continue
            if self._expected_type is not None and metadata.asset_type != self._expected_type:
                continue
            found.append(
                InstalledAssetInfo(
                    name=name,
                    description=metadata.asset.description,
                    version=metadata.version,
                    asset_type=metadata.asset_type,
                    install_path=entry,
                )
            )
        return found

    def verify_installed(self, target_base: Path, name: str, version: str) -> tuple[bool, str]:
        if not self.file_path(target_base, name).is_file():
            return False, "file not found"
        metadata = self._read_sidecar(target_base, name)
        if metadata is None:
            return True, "installed (no version info)"
        if self._expected_type is not None and metadata.asset_type != self._expected_type:
            return False, f"installed as a {metadata.asset_type.key} asset"
        if metadata.version != version:
            return False, f"version mismatch: installed {metadata.version}, expected {version}"
        return True, "installed"
