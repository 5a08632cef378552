"""Options and helpers shared by CLI commands."""

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TypeVar

import click

from sx.cli.context import SxContext
from sx.cli.output import user_output
from sx.clients.client import Client
from sx.clients.orchestrator import BatchResult
from sx.clients.types import AssetResult
from sx.core.scope import InstallScope

F = TypeVar("F", bound=Callable[..., Any])

_STATUS_STYLE = {
    "success": ("✓", "green"),
    "skipped": ("-", "yellow"),
    "failed": ("✗", "red"),
}


def find_repo_root(start: Path) -> Path | None:
    """Walk up from `start` to the nearest directory containing `.git`."""
    for candidate in (start, *start.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


def client_option(f: F) -> F:
    return click.option(
        "--client",
        "client_ids",
        multiple=True,
        help="Client ID to target (repeatable). Defaults to enabled or detected clients.",
    )(f)


def scope_options(f: F) -> F:
    f = click.option(
        "--path",
        "sub_path",
        default=None,
        help="Sub-path inside the repository (for --scope path).",
    )(f)
    f = click.option(
        "--repo-root",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Repository root. Detected from the working directory when omitted.",
    )(f)
    f = click.option(
        "--scope",
        "scope_type",
        type=click.Choice(["global", "repo", "path"]),
        default="global",
        show_default=True,
        help="How widely to install.",
    )(f)
    return f


def build_scope(
    ctx: SxContext, scope_type: str, repo_root: Path | None, sub_path: str | None
) -> InstallScope:
    """Turn CLI options into an InstallScope.

    A missing repository root is not an error here; clients report it as a
    scope error for every asset.
    """
    if scope_type == "global":
        return InstallScope.global_scope()
    root = repo_root if repo_root is not None else find_repo_root(ctx.cwd)
    if scope_type == "repo":
        return InstallScope.repository(root)
    return InstallScope.sub_path(root, sub_path or "")


def select_clients(ctx: SxContext, client_ids: Sequence[str]) -> list[Client]:
    """Clients named on the command line, else the configured ones, else detected ones.

    Raises:
        UnknownClientError: If a named client does not exist
    """
    if client_ids:
        return [ctx.registry.get(client_id) for client_id in client_ids]
    config = ctx.installation.load_config()
    if config.enabled_clients:
        return [ctx.registry.get(client_id) for client_id in config.enabled_clients]
    return ctx.registry.detect_installed()


def format_result(result: AssetResult) -> str:
    symbol, color = _STATUS_STYLE[result.status]
    return f"  {click.style(symbol, fg=color)} {result.asset_name}: {result.message}"


def report_batches(ctx: SxContext, batches: Sequence[BatchResult]) -> bool:
    """Print each client's results. Returns True if nothing failed."""
    ok = True
    for batch in batches:
        client = ctx.registry.get(batch.client_id)
        user_output(click.style(client.display_name, bold=True))
        for result in batch.results:
            user_output(format_result(result))
        if not batch.ok:
            ok = False
    return ok
