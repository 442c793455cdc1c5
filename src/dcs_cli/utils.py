"""CLI utility functions."""

import sys

import click


def run_command(command: click.Command, prog_name: str | None = None) -> None:
    """Run a click command as a console script.

    Same as click's standalone mode, except usage errors exit with 1
    instead of 2 so every validation failure shares one exit code.
    """
    try:
        command.main(prog_name=prog_name or command.name, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(1)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
