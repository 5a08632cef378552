"""Dependencies threaded through CLI commands via click's context object."""

from dataclasses import dataclass
from pathlib import Path

from sx.clients.composition import build_default_registry
from sx.clients.registry import ClientRegistry
from sx.config.abc import SxInstallation
from sx.config.real import RealSxInstallation, default_root


@dataclass(frozen=True)
class SxContext:
    """Immutable context created at the CLI entry point.

    Tests construct their own with a fake installation and a registry built
    against a temporary home directory.
    """

    installation: SxInstallation
    registry: ClientRegistry
    cwd: Path


def create_context() -> SxContext:
    installation = RealSxInstallation(default_root())
    registry = build_default_registry(Path.home(), installation.cache_dir())
    return SxContext(installation=installation, registry=registry, cwd=Path.cwd())
