"""Inspect and change the user configuration in ~/.sx/config.toml."""

import click

from sx.cli.context import SxContext
from sx.cli.output import machine_output, user_output


def _format_config_value(value: object) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


@click.group("config")
def config_group() -> None:
    """Manage sx configuration."""


@config_group.command("path")
@click.pass_obj
def config_path(ctx: SxContext) -> None:
    """Print the location of the config file."""
    machine_output(str(ctx.installation.config_path()))


@config_group.command("show")
@click.pass_obj
def config_show(ctx: SxContext) -> None:
    """Print the current configuration."""
    if not ctx.installation.config_exists():
        user_output("(not configured - defaults in use)")
    config = ctx.installation.load_config()

    user_output(click.style("Clients:", bold=True))
    if config.enabled_clients:
        user_output(f"  enabled-clients={', '.join(config.enabled_clients)}")
    else:
        user_output("  enabled-clients=(all detected)")

    user_output(click.style("Bootstrap:", bold=True))
    if not config.bootstrap:
        user_output("  (no choices recorded)")
    for key, value in config.bootstrap.items():
        user_output(f"  {key}={_format_config_value(value)}")


@config_group.command("set-clients")
@click.argument("client_ids", nargs=-1)
@click.option("--all", "all_clients", is_flag=True, help="Clear the list and use every client.")
@click.pass_obj
def config_set_clients(ctx: SxContext, client_ids: tuple[str, ...], all_clients: bool) -> None:
    """Restrict installs to CLIENT_IDS, or use every detected client with --all."""
    if all_clients and client_ids:
        raise click.UsageError("pass client IDs or --all, not both")
    if not all_clients and not client_ids:
        raise click.UsageError("pass at least one client ID, or --all")

    # Raises UnknownClientError for typos before anything is written.
    for client_id in client_ids:
        ctx.registry.get(client_id)

    config = ctx.installation.load_config()
    ctx.installation.save_config(config.with_enabled_clients(tuple(dict.fromkeys(client_ids))))
    if all_clients:
        user_output("Installing into every detected client")
    else:
        user_output(f"Enabled clients: {', '.join(dict.fromkeys(client_ids))}")
