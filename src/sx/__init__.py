"""sx CLI entry point.

This package installs AI-assistant assets (skills, commands, agents, rules,
hooks and MCP servers) into the native layout of several AI coding tools.
See `sx --help` for details.
"""

from sx.cli.cli import cli


def main() -> None:
    """CLI entry point used by the `sx` console script."""
    cli()
