"""Abstract base class for the sx installation directory.

SxInstallation provides access to `~/.sx/`: the user config file and the
cache directory. Commands go through this gateway instead of calling
Path.home() so tests can substitute a fake.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from sx.config.types import SxConfig


class SxInstallation(ABC):
    """Abstract interface for ~/.sx/ operations."""

    @abstractmethod
    def config_path(self) -> Path: ...

    @abstractmethod
    def config_exists(self) -> bool: ...

    @abstractmethod
    def load_config(self) -> SxConfig:
        """Load the user config. A missing file yields the defaults.

        Raises:
            UserConfigError: If the file exists but is malformed
        """
        ...

    @abstractmethod
    def save_config(self, config: SxConfig) -> None:
        """Persist the user config, keeping comments and unknown keys."""
        ...

    @abstractmethod
    def cache_dir(self) -> Path:
        """Directory for caches such as per-client session records."""
        ...
