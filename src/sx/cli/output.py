"""Output helpers.

Human-facing messages go to stderr so stdout stays clean for anything a
script might consume.
"""

import sys

import click


def user_output(message: str = "", nl: bool = True) -> None:
    click.echo(message, file=sys.stderr, nl=nl)


def machine_output(message: str = "", nl: bool = True) -> None:
    click.echo(message, nl=nl)


def user_confirm(prompt: str, default: bool) -> bool:
    """Ask a yes/no question on stderr.

    stderr is flushed first so pending output appears before the prompt.
    """
    sys.stderr.flush()
    return click.confirm(prompt, default=default, err=True)
