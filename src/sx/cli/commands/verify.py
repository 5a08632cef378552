"""Check that asset archives are installed as expected."""

from pathlib import Path

import click

from sx.assets.bundle import load_bundle
from sx.cli.common import build_scope, client_option, scope_options, select_clients
from sx.cli.context import SxContext
from sx.cli.output import user_output
from sx.clients.orchestrator import verify


@click.command("verify")
@click.argument(
    "archives",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@client_option
@scope_options
@click.pass_obj
def verify_cmd(
    ctx: SxContext,
    archives: tuple[Path, ...],
    client_ids: tuple[str, ...],
    scope_type: str,
    repo_root: Path | None,
    sub_path: str | None,
) -> None:
    """Verify that the assets in ARCHIVES are installed.

    Exits non-zero if any asset is missing for any selected client.
    """
    assets = [load_bundle(path).asset for path in archives]
    clients = select_clients(ctx, client_ids)
    if not clients:
        user_output("No clients detected. Use --client to choose one.")
        return

    scope = build_scope(ctx, scope_type, repo_root, sub_path)
    all_installed = True
    for client in clients:
        batch = verify(client, assets, scope)
        user_output(click.style(client.display_name, bold=True))
        for result in batch.results:
            if result.installed:
                symbol = click.style("✓", fg="green")
            else:
                symbol = click.style("✗", fg="red")
                all_installed = False
            user_output(f"  {symbol} {result.asset.name}: {result.message}")

    if not all_installed:
        raise SystemExit(1)
