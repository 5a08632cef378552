"""Remove installed assets by name."""

from pathlib import Path

import click

from sx.assets.types import ALL_ASSET_TYPES, Asset, asset_type_from_key
from sx.cli.common import (
    build_scope,
    client_option,
    report_batches,
    scope_options,
    select_clients,
)
from sx.cli.context import SxContext
from sx.cli.output import user_output
from sx.clients.client import Client
from sx.clients.orchestrator import BatchResult, refresh_asset_support, uninstall
from sx.clients.types import AssetResult, InstallOptions, UninstallRequest
from sx.core.errors import ScopeResolutionError
from sx.core.scope import InstallScope


def _uninstall_from(
    client: Client,
    names: tuple[str, ...],
    type_key: str | None,
    scope: InstallScope,
    dry_run: bool,
) -> BatchResult:
    """Resolve names to installed assets for one client, then remove them.

    Without --type the asset type is read from what is installed; names that
    cannot be found are reported as not installed.
    """
    try:
        installed = {info.name: info for info in client.scan_installed_assets(scope)}
    except ScopeResolutionError as e:
        return BatchResult(
            client_id=client.client_id,
            results=tuple(AssetResult.failed(name, e) for name in names),
            scope_error=e,
        )

    assets: list[Asset] = []
    unresolved: dict[str, AssetResult] = {}
    for name in names:
        info = installed.get(name)
        asset_type = asset_type_from_key(type_key) if type_key else None
        if asset_type is None and info is not None:
            asset_type = info.asset_type
        if asset_type is None:
            unresolved[name] = AssetResult.success(name, "not installed")
            continue
        version = info.version if info is not None else ""
        assets.append(Asset(name=name, version=version, asset_type=asset_type))

    batch = uninstall(
        client,
        UninstallRequest(
            assets=tuple(assets), scope=scope, options=InstallOptions(dry_run=dry_run)
        ),
    )
    removed = {result.asset_name: result for result in batch.results}
    return BatchResult(
        client_id=client.client_id,
        results=tuple(removed.get(name) or unresolved[name] for name in names),
        scope_error=batch.scope_error,
    )


@click.command("uninstall")
@click.argument("names", nargs=-1, required=True)
@click.option(
    "--type",
    "type_key",
    type=click.Choice([t.key for t in ALL_ASSET_TYPES]),
    default=None,
    help="Asset type. Needed for assets that leave no files behind (config-only MCP servers).",
)
@client_option
@scope_options
@click.option("--dry-run", is_flag=True, help="Report what would be removed without writing.")
@click.pass_obj
def uninstall_cmd(
    ctx: SxContext,
    names: tuple[str, ...],
    type_key: str | None,
    client_ids: tuple[str, ...],
    scope_type: str,
    repo_root: Path | None,
    sub_path: str | None,
    dry_run: bool,
) -> None:
    """Remove installed assets by name."""
    clients = select_clients(ctx, client_ids)
    if not clients:
        user_output("No clients detected. Use --client to choose one.")
        return

    scope = build_scope(ctx, scope_type, repo_root, sub_path)
    batches = [_uninstall_from(client, names, type_key, scope, dry_run) for client in clients]
    for client, batch in zip(clients, batches, strict=True):
        if batch.scope_error is None and batch.succeeded and not dry_run:
            refresh_asset_support(client, scope)
    if not report_batches(ctx, batches):
        raise SystemExit(1)
