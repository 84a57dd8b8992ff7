"""Install location commands for cavectl CLI."""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from cavectl_core import InstallLocation

from ..context import CliContext

console = Console()
pass_obj = click.pass_obj


@click.group('locations', invoke_without_command=True)
@click.pass_context
def locations_group(click_ctx):
    """Manage install locations"""
    if click_ctx.invoked_subcommand is None:
        click_ctx.invoke(locations_list)


@locations_group.command('add')
@click.argument('location_id')
@click.argument('path', type=click.Path(file_okay=False))
@click.option('--default', 'make_default', is_flag=True, help='Use as the default install location')
@pass_obj
def locations_add(ctx: CliContext, location_id, path, make_default):
    """Register a folder as an install location

    Example:
        cavectl locations add main ~/Games --default
    """
    path = Path(path).expanduser().resolve()
    path.mkdir(parents=True, exist_ok=True)

    ctx.registry.add_install_location(InstallLocation(id=location_id, path=path))
    console.print(f"[green]✓[/green] Install location [cyan]{location_id}[/cyan] -> {path}")

    if make_default:
        ctx.config.set('install.default_location', location_id)
        console.print("[dim]Set as default install location[/dim]")


@locations_group.command('list')
@pass_obj
def locations_list(ctx: CliContext):
    """List install locations"""
    locations = ctx.registry.list_install_locations()
    if not locations:
        console.print("[yellow]No install locations.[/yellow]")
        console.print("[dim]Add one with 'cavectl locations add <id> <path>'[/dim]")
        return

    default = ctx.config.default_install_location

    table = Table()
    table.add_column("ID", style="cyan")
    table.add_column("Path")
    table.add_column("Caves", justify="right")
    table.add_column("Default", justify="center")

    for location in locations:
        caves = ctx.registry.list_caves(install_location_id=location.id)
        table.add_row(
            location.id,
            str(location.path),
            str(len(caves)),
            "✓" if location.id == default else "",
        )

    console.print(table)


@locations_group.command('remove')
@click.argument('location_id')
@pass_obj
def locations_remove(ctx: CliContext, location_id):
    """Forget an install location (files are left in place)"""
    try:
        removed = ctx.registry.remove_install_location(location_id)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if not removed:
        console.print(f"[red]Install location '{location_id}' not found[/red]")
        sys.exit(1)

    if ctx.config.default_install_location == location_id:
        ctx.config.set('install.default_location', None)

    console.print(f"[green]✓[/green] Removed install location {location_id}")
