"""Install or remove the infrastructure sx adds to each client for itself.

Bootstrap options are opt-in pieces such as a session-start hook that keeps
assets up to date, an analytics hook, and the sx query MCP server. Choices
are remembered in ~/.sx/config.toml.
"""

from collections.abc import Sequence

import click

from sx.bootstrap.options import BootstrapOption, resolve_enabled
from sx.cli.common import client_option, format_result, select_clients
from sx.cli.context import SxContext
from sx.cli.output import user_confirm, user_output
from sx.clients.client import Client


def _collect_choices(
    ctx: SxContext,
    clients: Sequence[Client],
    enable: Sequence[str],
    disable: Sequence[str],
    ask: bool,
) -> dict[str, bool]:
    """Choices given on the command line, plus answers to prompts when asking."""
    known = {option.key for client in clients for option in client.bootstrap_options()}
    for key in (*enable, *disable):
        if key not in known:
            raise click.UsageError(
                f"unknown bootstrap option '{key}' (available: {', '.join(sorted(known))})"
            )
    overlap = set(enable) & set(disable)
    if overlap:
        raise click.UsageError(f"option both enabled and disabled: {', '.join(sorted(overlap))}")

    choices = {key: True for key in enable}
    choices.update({key: False for key in disable})
    if not ask:
        return choices

    saved = ctx.installation.load_config().bootstrap
    asked: set[str] = set()
    for client in clients:
        for option in client.bootstrap_options():
            if option.key in choices or option.key in asked:
                continue
            asked.add(option.key)
            user_output(option.description)
            default = saved.get(option.key, option.default_enabled)
            answer = user_confirm(option.prompt, default=default)
            if not answer and option.decline_note:
                user_output(click.style(option.decline_note, dim=True))
            choices[option.key] = answer
    return choices


def _selected(client: Client, choices: dict[str, bool]) -> list[BootstrapOption]:
    return resolve_enabled(client.bootstrap_options(), choices)


@click.group("bootstrap")
def bootstrap_group() -> None:
    """Manage sx hooks and MCP servers inside each client."""


@bootstrap_group.command("options")
@client_option
@click.pass_obj
def bootstrap_options_cmd(ctx: SxContext, client_ids: tuple[str, ...]) -> None:
    """Show the bootstrap options each client offers."""
    config = ctx.installation.load_config()
    for client in select_clients(ctx, client_ids):
        user_output(click.style(client.display_name, bold=True))
        for option in client.bootstrap_options():
            enabled = config.bootstrap.get(option.key, option.default_enabled)
            state = click.style("on", fg="green") if enabled else click.style("off", dim=True)
            user_output(f"  [{state}] {option.key}: {option.description}")


@bootstrap_group.command("install")
@client_option
@click.option("--enable", multiple=True, metavar="KEY", help="Turn an option on (repeatable).")
@click.option("--disable", multiple=True, metavar="KEY", help="Turn an option off (repeatable).")
@click.option("--ask", is_flag=True, help="Prompt for every option not given on the command line.")
@click.pass_obj
def bootstrap_install_cmd(
    ctx: SxContext,
    client_ids: tuple[str, ...],
    enable: tuple[str, ...],
    disable: tuple[str, ...],
    ask: bool,
) -> None:
    """Install enabled bootstrap options into each client.

    Options that were turned off are removed, so re-running converges on
    the saved choices.
    """
    clients = select_clients(ctx, client_ids)
    if not clients:
        user_output("No clients detected. Use --client to choose one.")
        return

    choices = _collect_choices(ctx, clients, enable, disable, ask)
    config = ctx.installation.load_config()
    if choices:
        config = config.with_bootstrap_choices(choices)
        ctx.installation.save_config(config)

    ok = True
    for client in clients:
        wanted = _selected(client, config.bootstrap)
        wanted_keys = {option.key for option in wanted}
        unwanted = [o for o in client.bootstrap_options() if o.key not in wanted_keys]
        results = client.install_bootstrap(wanted)
        if unwanted:
            results.extend(client.uninstall_bootstrap(unwanted))
        user_output(click.style(client.display_name, bold=True))
        for result in results:
            user_output(format_result(result))
            if result.status == "failed":
                ok = False
    if not ok:
        raise SystemExit(1)


@bootstrap_group.command("uninstall")
@client_option
@click.pass_obj
def bootstrap_uninstall_cmd(ctx: SxContext, client_ids: tuple[str, ...]) -> None:
    """Remove every bootstrap option from each client.

    Hooks and notify commands the user set up themselves are left alone.
    """
    clients = select_clients(ctx, client_ids)
    if not clients:
        user_output("No clients detected. Use --client to choose one.")
        return

    ok = True
    for client in clients:
        user_output(click.style(client.display_name, bold=True))
        for result in client.uninstall_bootstrap(client.bootstrap_options()):
            user_output(format_result(result))
            if result.status == "failed":
                ok = False
    if not ok:
        raise SystemExit(1)
