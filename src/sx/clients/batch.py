"""Per-asset batch loops shared by client implementations.

Clients supply a `HandlerFactory` that resolves the handler and target base
directory for an asset type in a scope. Every factory call happens before
any handler runs, so a ScopeResolutionError aborts the batch with nothing
written. After that, each asset's failure is isolated to its own result.
"""

import logging
from collections.abc import Callable, Collection, Sequence
from pathlib import Path

from sx.assets.installed import InstalledAssetInfo
from sx.assets.types import Asset, AssetType
from sx.clients.types import AssetResult, InstallRequest, UninstallRequest, VerifyResult
from sx.core.errors import OperationCancelledError, SxError
from sx.core.scope import InstallScope
from sx.handlers.base import AssetHandler

logger = logging.getLogger(__name__)

HandlerFactory = Callable[[AssetType, InstallScope], tuple[AssetHandler, Path]]


def _unsupported(asset_type: AssetType) -> str:
    return f"unsupported asset type: {asset_type.key}"


def install_batch(
    client_id: str,
    supported_types: Collection[AssetType],
    request: InstallRequest,
    handler_for: HandlerFactory,
) -> list[AssetResult]:
    plans: list[tuple[AssetHandler, Path] | None] = []
    for bundle in request.bundles:
        asset_type = bundle.metadata.asset_type
        if asset_type in supported_types:
            plans.append(handler_for(asset_type, request.scope))
        else:
            plans.append(None)

    results: list[AssetResult] = []
    for bundle, plan in zip(request.bundles, plans, strict=True):
        if plan is None:
            message = _unsupported(bundle.metadata.asset_type)
            results.append(AssetResult.skipped(bundle.name, message))
            continue
        handler, target_base = plan
        reason = handler.skip_reason(bundle.metadata)
        if reason is not None:
            results.append(AssetResult.skipped(bundle.name, reason))
            continue
        if request.options.dry_run:
            message = f"dry run: would install to {target_base}"
            results.append(AssetResult.skipped(bundle.name, message))
            continue
        try:
            request.cancel.raise_if_cancelled()
            handler.install(bundle, target_base, request.cancel)
        except OperationCancelledError as e:
            results.append(AssetResult.failed(bundle.name, e))
            continue
        except (SxError, OSError) as e:
            logger.debug("Install of %s for %s failed: %s", bundle.name, client_id, e)
            results.append(AssetResult.failed(bundle.name, e))
            continue
        results.append(AssetResult.success(bundle.name, f"installed to {target_base}"))
    return results


def uninstall_batch(
    client_id: str,
    supported_types: Collection[AssetType],
    request: UninstallRequest,
    handler_for: HandlerFactory,
) -> list[AssetResult]:
    plans: list[tuple[AssetHandler, Path] | None] = []
    for asset in request.assets:
        if asset.asset_type in supported_types:
            plans.append(handler_for(asset.asset_type, request.scope))
        else:
            plans.append(None)

    results: list[AssetResult] = []
    for asset, plan in zip(request.assets, plans, strict=True):
        if plan is None:
            results.append(AssetResult.skipped(asset.name, _unsupported(asset.asset_type)))
            continue
        handler, target_base = plan
        if request.options.dry_run:
            message = f"dry run: would remove from {target_base}"
            results.append(AssetResult.skipped(asset.name, message))
            continue
        try:
            request.cancel.raise_if_cancelled()
            removed = handler.remove(asset, target_base)
        except (SxError, OSError) as e:
            logger.debug("Uninstall of %s for %s failed: %s", asset.name, client_id, e)
            results.append(AssetResult.failed(asset.name, e))
            continue
        results.append(AssetResult.success(asset.name, "removed" if removed else "not installed"))
    return results


def verify_batch(
    supported_types: Collection[AssetType],
    assets: Sequence[Asset],
    scope: InstallScope,
    handler_for: HandlerFactory,
) -> list[VerifyResult]:
    plans = [
        handler_for(asset.asset_type, scope) if asset.asset_type in supported_types else None
        for asset in assets
    ]
    results: list[VerifyResult] = []
    for asset, plan in zip(assets, plans, strict=True):
        if plan is None:
            results.append(VerifyResult(asset, False, _unsupported(asset.asset_type)))
            continue
        handler, target_base = plan
        try:
            installed, message = handler.verify(asset, target_base)
        except (SxError, OSError) as e:
            logger.debug("Verify of %s failed: %s", asset.name, e)
            installed, message = False, str(e)
        results.append(VerifyResult(asset=asset, installed=installed, message=message))
    return results


def scan_all(
    supported_types: Sequence[AssetType],
    scope: InstallScope,
    handler_for: HandlerFactory,
) -> list[InstalledAssetInfo]:
    found: list[InstalledAssetInfo] = []
    for asset_type in supported_types:
        handler, target_base = handler_for(asset_type, scope)
        found.extend(handler.scan(target_base))
    return found
