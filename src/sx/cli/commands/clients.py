"""Show the clients sx knows about."""

import click
from rich.console import Console
from rich.table import Table

from sx.cli.context import SxContext
from sx.core.cancellation import CancelToken


@click.command("clients")
@click.option("--versions", is_flag=True, help="Query each installed tool for its version.")
@click.pass_obj
def clients_cmd(ctx: SxContext, versions: bool) -> None:
    """List supported clients, whether they are installed, and what they accept."""
    enabled = set(ctx.installation.load_config().enabled_clients)

    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", no_wrap=True)
    table.add_column("Installed", no_wrap=True)
    table.add_column("Enabled", no_wrap=True)
    table.add_column("Types")
    if versions:
        table.add_column("Version", no_wrap=True)

    cancel = CancelToken()
    for client in ctx.registry.all():
        installed = client.is_installed()
        installed_display = "[green]yes[/green]" if installed else "[dim]no[/dim]"
        if not enabled:
            enabled_display = "[dim]auto[/dim]"
        elif client.client_id in enabled:
            enabled_display = "[green]yes[/green]"
        else:
            enabled_display = "[dim]no[/dim]"
        types = ", ".join(t.key for t in client.supported_types)
        row = [client.client_id, client.display_name, installed_display, enabled_display, types]
        if versions:
            version = client.get_version(cancel) if installed else None
            row.append(version or "[dim]-[/dim]")
        table.add_row(*row)

    console = Console(stderr=True, force_terminal=True, width=200)
    console.print(table)
