"""List managed assets installed in a scope."""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from sx.cli.common import build_scope, client_option, scope_options, select_clients
from sx.cli.context import SxContext
from sx.cli.output import user_output
from sx.clients.orchestrator import list_installed
from sx.core.errors import ScopeResolutionError


@click.command("list")
@client_option
@scope_options
@click.pass_obj
def list_cmd(
    ctx: SxContext,
    client_ids: tuple[str, ...],
    scope_type: str,
    repo_root: Path | None,
    sub_path: str | None,
) -> None:
    """List installed assets for each client."""
    clients = select_clients(ctx, client_ids)
    if not clients:
        user_output("No clients detected. Use --client to choose one.")
        return

    scope = build_scope(ctx, scope_type, repo_root, sub_path)

    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("Client", style="cyan", no_wrap=True)
    table.add_column("Type", no_wrap=True)
    table.add_column("Name", style="yellow", no_wrap=True)
    table.add_column("Version", no_wrap=True)
    table.add_column("Path")

    rows = 0
    for client in clients:
        try:
            infos = list_installed(client, scope)
        except ScopeResolutionError as e:
            user_output(click.style("Error: ", fg="red") + f"{client.display_name}: {e}")
            raise SystemExit(1) from e
        for info in infos:
            type_label = info.asset_type.label if info.asset_type is not None else "-"
            version = info.version or "[dim]unknown[/dim]"
            table.add_row(client.client_id, type_label, info.name, version, str(info.install_path))
            rows += 1

    if rows == 0:
        user_output("No assets installed.")
        return

    console = Console(stderr=True, force_terminal=True, width=200)
    console.print(table)
