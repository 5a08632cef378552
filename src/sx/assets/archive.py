"""Read access to an asset's zip payload."""

import io
import logging
import zipfile
from functools import cached_property
from pathlib import Path, PurePosixPath

from sx.assets.metadata import METADATA_FILE, Metadata, parse_metadata
from sx.core.cancellation import CancelToken
from sx.core.errors import AssetValidationError

logger = logging.getLogger(__name__)


class AssetArchive:
    """An asset archive held in memory.

    The file listing is computed once and cached; every "is this a file in the
    archive" decision goes through `contains()` on that listing.
    """

    def __init__(self, data: bytes) -> None:
        self._data = data

    @staticmethod
    def from_path(path: Path) -> "AssetArchive":
        return AssetArchive(path.read_bytes())

    @property
    def data(self) -> bytes:
        return self._data

    def _open(self) -> zipfile.ZipFile:
        try:
            return zipfile.ZipFile(io.BytesIO(self._data))
        except zipfile.BadZipFile as e:
            raise AssetValidationError(f"invalid asset archive: {e}") from e

    @cached_property
    def files(self) -> tuple[str, ...]:
        """Relative paths of all regular files, in archive order."""
        with self._open() as zf:
            return tuple(info.filename for info in zf.infolist() if not info.is_dir())

    def contains(self, path: str) -> bool:
        return path in self.files

    def has_content_files(self) -> bool:
        """Return True if the archive carries anything besides metadata.toml."""
        return any(name != METADATA_FILE for name in self.files)

    def read_file(self, path: str) -> bytes:
        if not self.contains(path):
            raise AssetValidationError(f"file not found in archive: {path}")
        with self._open() as zf:
            return zf.read(path)

    def read_text(self, path: str) -> str:
        try:
            return self.read_file(path).decode("utf-8")
        except UnicodeDecodeError as e:
            raise AssetValidationError(f"{path} is not valid UTF-8: {e}") from e

    def read_metadata(self) -> Metadata:
        if not self.contains(METADATA_FILE):
            raise AssetValidationError(f"{METADATA_FILE} not found in archive")
        return parse_metadata(self.read_file(METADATA_FILE))

    def extract_to(self, dest: Path, cancel: CancelToken) -> list[Path]:
        """Extract every file under `dest`, preserving relative paths.

        Cancellation is checked before each entry. A cancelled extraction
        leaves a partial tree; installers remove the directory before
        extracting, so a retry starts clean.

        Returns:
            Paths of the extracted files

        Raises:
            AssetValidationError: If an entry would escape `dest`
            OperationCancelledError: If `cancel` fires mid-extraction
        """
        written: list[Path] = []
        dest.mkdir(parents=True, exist_ok=True)
        with self._open() as zf:
            for info in zf.infolist():
                cancel.raise_if_cancelled()
                relative = PurePosixPath(info.filename)
                if relative.is_absolute() or ".." in relative.parts:
                    raise AssetValidationError(f"archive entry escapes target: {info.filename}")
                target = dest.joinpath(*relative.parts)
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(zf.read(info))
                mode = (info.external_attr >> 16) & 0o777
                if mode:
                    target.chmod(mode)
                written.append(target)
        logger.debug("Extracted %d files to %s", len(written), dest)
        return written
