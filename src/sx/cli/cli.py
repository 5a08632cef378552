import logging

import click

from sx.cli.commands.bootstrap import bootstrap_group
from sx.cli.commands.clients import clients_cmd
from sx.cli.commands.config import config_group
from sx.cli.commands.install import install_cmd
from sx.cli.commands.list_cmd import list_cmd
from sx.cli.commands.uninstall import uninstall_cmd
from sx.cli.commands.verify import verify_cmd
from sx.cli.context import create_context
from sx.cli.output import user_output
from sx.core.errors import SxError

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

logger = logging.getLogger(__name__)


class SxGroup(click.Group):
    """Command group that turns sx errors into a one-line message and exit code 1."""

    def invoke(self, ctx: click.Context) -> object:
        try:
            return super().invoke(ctx)
        except SxError as e:
            logger.debug("Command failed", exc_info=True)
            user_output(click.style("Error: ", fg="red") + str(e))
            raise SystemExit(1) from e


@click.group(cls=SxGroup, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="sx")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Install AI-assistant assets into the tools you use."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context()


cli.add_command(bootstrap_group)
cli.add_command(clients_cmd)
cli.add_command(config_group)
cli.add_command(install_cmd)
cli.add_command(list_cmd)
cli.add_command(uninstall_cmd)
cli.add_command(verify_cmd)
