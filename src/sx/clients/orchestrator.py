"""Batch orchestration over one or more clients.

Every batch returns exactly one result per requested asset, in request
order, whatever the client reported: a scope error fails every asset with
the same message, and assets a client forgot to report are filled in as
failed.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from sx.assets.installed import InstalledAssetInfo
from sx.assets.types import Asset
from sx.clients.client import Client
from sx.clients.types import AssetResult, InstallRequest, UninstallRequest, VerifyResult
from sx.core.errors import (
    AssetValidationError,
    MissingResultError,
    ScopeResolutionError,
    SxError,
)
from sx.core.scope import InstallScope

logger = logging.getLogger(__name__)

NO_RESULT_MESSAGE = "no result reported"


@dataclass(frozen=True)
class BatchResult:
    """Results of one install or uninstall batch for one client.

    Attributes:
        client_id: Client the batch ran against
        results: One result per requested asset, in request order
        scope_error: Set when the scope could not be resolved; every result
            is then Failed with this error
    """

    client_id: str
    results: tuple[AssetResult, ...]
    scope_error: ScopeResolutionError | None = None

    @property
    def failed(self) -> list[AssetResult]:
        return [r for r in self.results if r.status == "failed"]

    @property
    def succeeded(self) -> list[AssetResult]:
        return [r for r in self.results if r.status == "success"]

    @property
    def skipped(self) -> list[AssetResult]:
        return [r for r in self.results if r.status == "skipped"]

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class VerifyBatchResult:
    client_id: str
    results: tuple[VerifyResult, ...]
    scope_error: ScopeResolutionError | None = None


def reject_duplicates(names: Sequence[str]) -> None:
    """Raise AssetValidationError if any asset name appears twice."""
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise AssetValidationError(f"asset requested more than once: {name}")
        seen.add(name)


def _complete(names: Sequence[str], reported: Sequence[AssetResult]) -> tuple[AssetResult, ...]:
    by_name: dict[str, AssetResult] = {}
    for result in reported:
        by_name.setdefault(result.asset_name, result)
    completed: list[AssetResult] = []
    for name in names:
        if name in by_name:
            completed.append(by_name[name])
        else:
            completed.append(AssetResult.failed(name, MissingResultError(NO_RESULT_MESSAGE)))
    return tuple(completed)


def _scope_failure(
    client_id: str, names: Sequence[str], error: ScopeResolutionError
) -> BatchResult:
    logger.debug("Scope resolution failed for %s: %s", client_id, error)
    return BatchResult(
        client_id=client_id,
        results=tuple(AssetResult.failed(name, error) for name in names),
        scope_error=error,
    )


def install(client: Client, request: InstallRequest) -> BatchResult:
    """Install a batch of bundles into one client and scope.

    Raises:
        AssetValidationError: If the request names the same asset twice
    """
    names = [bundle.name for bundle in request.bundles]
    reject_duplicates(names)
    try:
        reported = client.install_assets(request)
    except ScopeResolutionError as e:
        return _scope_failure(client.client_id, names, e)
    return BatchResult(client_id=client.client_id, results=_complete(names, reported))


def uninstall(client: Client, request: UninstallRequest) -> BatchResult:
    names = [asset.name for asset in request.assets]
    reject_duplicates(names)
    try:
        reported = client.uninstall_assets(request)
    except ScopeResolutionError as e:
        return _scope_failure(client.client_id, names, e)
    return BatchResult(client_id=client.client_id, results=_complete(names, reported))


def verify(client: Client, assets: Sequence[Asset], scope: InstallScope) -> VerifyBatchResult:
    reject_duplicates([asset.name for asset in assets])
    try:
        reported = client.verify_assets(assets, scope)
    except ScopeResolutionError as e:
        return VerifyBatchResult(
            client_id=client.client_id,
            results=tuple(VerifyResult(asset, False, str(e)) for asset in assets),
            scope_error=e,
        )
    by_name = {result.asset.name: result for result in reported}
    return VerifyBatchResult(
        client_id=client.client_id,
        results=tuple(
            by_name.get(asset.name, VerifyResult(asset, False, NO_RESULT_MESSAGE))
            for asset in assets
        ),
    )


def list_installed(client: Client, scope: InstallScope) -> list[InstalledAssetInfo]:
    """Every managed asset of every supported type installed in a scope.

    Raises:
        ScopeResolutionError: If the scope cannot be resolved for this client
    """
    return client.scan_installed_assets(scope)


def refresh_asset_support(client: Client, scope: InstallScope) -> None:
    try:
        client.ensure_asset_support(scope)
    except (SxError, OSError) as e:
        logger.warning("Could not refresh asset discovery for %s: %s", client.client_id, e)


def install_for_clients(
    clients: Sequence[Client],
    request: InstallRequest,
    hook_input: Mapping[str, object] | None = None,
) -> list[BatchResult]:
    """Install the same batch into each client, in order.

    Clients whose `should_install` declines (e.g. a Cursor conversation that
    already ran its hook-mode install) are left out of the returned list,
    unless the request is forced. After a real install with at least one
    success, each client gets a chance to refresh its asset discovery
    (`ensure_asset_support`); a failed refresh is logged, not raised.
    """
    batches: list[BatchResult] = []
    for client in clients:
        if not request.options.force and not client.should_install(hook_input):
            logger.info("Skipping %s: install already ran for this session", client.client_id)
            continue
        batch = install(client, request)
        batches.append(batch)
        if batch.scope_error is None and batch.succeeded and not request.options.dry_run:
            refresh_asset_support(client, request.scope)
    return batches


def uninstall_for_clients(
    clients: Sequence[Client], request: UninstallRequest
) -> list[BatchResult]:
    batches = [uninstall(client, request) for client in clients]
    for client, batch in zip(clients, batches, strict=True):
        if batch.scope_error is None and batch.succeeded and not request.options.dry_run:
            refresh_asset_support(client, request.scope)
    return batches
