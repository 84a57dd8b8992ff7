"""Main entry point for cavectl CLI.

This module provides the CLI interface to cavectl.
All business logic is in cavectl-core; this package only handles
CLI presentation (click commands, rich output, prompts).
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from cavectl_core import __version__

from .context import CliContext

console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__, prog_name="cavectl")
@click.option('--verbose', '-v', is_flag=True, help='Show debug logs')
@click.pass_context
def cli(ctx, verbose):
    """cavectl - install games into caves

    Resolve an install request (game, upload, build, folder) and queue
    it for download.

    Examples:
        cavectl locations add main ~/Games        # Register an install location
        cavectl install 42 --location main        # Install game 42
        cavectl install 42 --cave <cave-id>       # Reinstall into an existing cave
        cavectl downloads                         # Show queued downloads
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    if ctx.obj is None:
        ctx.obj = CliContext.create()


# Import and register command groups
from .commands import (
    install,
    login,
    logout,
    keys_group,
    locations_group,
    caves_group,
    downloads_group,
    config_group,
)

cli.add_command(install)
cli.add_command(login)
cli.add_command(logout)
cli.add_command(keys_group, name="keys")
cli.add_command(locations_group, name="locations")
cli.add_command(caves_group, name="caves")
cli.add_command(downloads_group, name="downloads")
cli.add_command(config_group, name="config")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
