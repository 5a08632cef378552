"""Request and result types shared by clients and the orchestrator."""

from dataclasses import dataclass, field
from typing import Literal

from sx.assets.bundle import AssetBundle
from sx.assets.types import Asset
from sx.core.cancellation import CancelToken
from sx.core.scope import InstallScope

ResultStatus = Literal["success", "failed", "skipped"]


@dataclass(frozen=True)
class AssetResult:
    """Outcome of one asset in an install or uninstall batch."""

    asset_name: str
    status: ResultStatus
    message: str
    error: Exception | None = None

    @staticmethod
    def success(asset_name: str, message: str) -> "AssetResult":
        return AssetResult(asset_name=asset_name, status="success", message=message)

    @staticmethod
    def skipped(asset_name: str, message: str) -> "AssetResult":
        return AssetResult(asset_name=asset_name, status="skipped", message=message)

    @staticmethod
    def failed(asset_name: str, error: Exception) -> "AssetResult":
        return AssetResult(asset_name=asset_name, status="failed", message=str(error), error=error)


@dataclass(frozen=True)
class VerifyResult:
    """Whether one asset is installed as expected."""

    asset: Asset
    installed: bool
    message: str


@dataclass(frozen=True)
class InstallOptions:
    force: bool = False
    dry_run: bool = False
    verbose: bool = False


@dataclass(frozen=True)
class InstallRequest:
    bundles: tuple[AssetBundle, ...]
    scope: InstallScope
    options: InstallOptions = InstallOptions()
    cancel: CancelToken = field(default_factory=CancelToken)


@dataclass(frozen=True)
class UninstallRequest:
    assets: tuple[Asset, ...]
    scope: InstallScope
    options: InstallOptions = InstallOptions()
    cancel: CancelToken = field(default_factory=CancelToken)
