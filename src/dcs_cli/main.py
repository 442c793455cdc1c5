"""CLI main entry points."""

import click

from . import __version__
from .commands import build_images, setup
from .utils import run_command


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-v", "--version", prog_name="dcs", message="%(prog)s v%(version)s")
def cli() -> None:
    """DotCodeSchool developer tools."""


cli.add_command(build_images)
cli.add_command(setup)


def main() -> None:
    """Entry point for `dcs`."""
    run_command(cli, prog_name="dcs")


def build_images_main() -> None:
    """Entry point for `dcs-build-images`."""
    run_command(build_images, prog_name="dcs-build-images")


def setup_main() -> None:
    """Entry point for `dcs-setup`."""
    run_command(setup, prog_name="dcs-setup")


if __name__ == "__main__":
    main()
