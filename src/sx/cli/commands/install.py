"""Install asset archives into one or more clients."""

import json
import logging
from pathlib import Path
from typing import IO

import click

from sx.assets.bundle import load_bundle
from sx.cli.common import (
    build_scope,
    client_option,
    report_batches,
    scope_options,
    select_clients,
)
from sx.cli.context import SxContext
from sx.cli.output import user_output
from sx.clients.orchestrator import install_for_clients
from sx.clients.types import InstallOptions, InstallRequest

logger = logging.getLogger(__name__)


def read_hook_input(stream: IO[str]) -> dict[str, object] | None:
    """Parse the JSON object a client hook passes on stdin.

    Anything unreadable means "no hook input", which never blocks an install.
    """
    if stream.isatty():
        return None
    raw = stream.read()
    if not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.debug("Ignoring unparseable hook input: %s", e)
        return None
    if not isinstance(data, dict):
        return None
    return data


@click.command("install")
@click.argument(
    "archives",
    nargs=-1,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@client_option
@scope_options
@click.option(
    "--force",
    is_flag=True,
    help="Install even if this conversation's hook-mode install already ran.",
)
@click.option("--dry-run", is_flag=True, help="Report what would be installed without writing.")
@click.option(
    "--hook-mode",
    is_flag=True,
    help="Invoked from a client hook; reads the hook's JSON input from stdin.",
)
@click.pass_obj
def install_cmd(
    ctx: SxContext,
    archives: tuple[Path, ...],
    client_ids: tuple[str, ...],
    scope_type: str,
    repo_root: Path | None,
    sub_path: str | None,
    force: bool,
    dry_run: bool,
    hook_mode: bool,
) -> None:
    """Install asset archives (.zip with a metadata.toml).

    Examples:

    \b
      # Install a skill for every detected client
      sx install my-skill.zip

    \b
      # Install into the current repository for Cursor only
      sx install rules.zip --client cursor --scope repo
    """
    hook_input = read_hook_input(click.get_text_stream("stdin")) if hook_mode else None
    if not archives:
        if hook_mode:
            logger.debug("Hook-mode install with no archives; nothing to do")
            return
        raise click.UsageError("at least one archive is required")

    bundles = tuple(load_bundle(path) for path in archives)
    clients = select_clients(ctx, client_ids)
    if not clients:
        user_output("No clients detected. Use --client to choose one.")
        return

    request = InstallRequest(
        bundles=bundles,
        scope=build_scope(ctx, scope_type, repo_root, sub_path),
        options=InstallOptions(force=force, dry_run=dry_run),
    )
    batches = install_for_clients(clients, request, hook_input=hook_input)
    if not report_batches(ctx, batches):
        raise SystemExit(1)
