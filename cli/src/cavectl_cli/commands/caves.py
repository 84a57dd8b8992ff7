"""Cave commands for cavectl CLI."""

import sys

import click
from rich.console import Console
from rich.table import Table

from cavectl_core.uploads import format_upload

from ..context import CliContext

console = Console()
pass_obj = click.pass_obj


def _when(dt) -> str:
    return dt.strftime("%Y-%m-%d %H:%M") if dt else "-"


@click.group('caves', invoke_without_command=True)
@click.pass_context
def caves_group(click_ctx):
    """Inspect installed games"""
    if click_ctx.invoked_subcommand is None:
        click_ctx.invoke(caves_list)


@caves_group.command('list')
@click.option('--location', '-l', 'location_id', help='Only caves in this install location')
@click.option('--game', '-g', 'game_id', type=int, help='Only caves of this game')
@pass_obj
def caves_list(ctx: CliContext, location_id, game_id):
    """List caves"""
    caves = ctx.registry.list_caves(install_location_id=location_id, game_id=game_id)
    if not caves:
        console.print("[yellow]No caves found.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="cyan")
    table.add_column("Game")
    table.add_column("Location")
    table.add_column("Folder")
    table.add_column("Last touched", style="dim")

    for cave in caves:
        title = cave.game.title if cave.game and cave.game.title else str(cave.game_id or "-")
        table.add_row(
            cave.id,
            title,
            cave.install_location_id or "-",
            cave.install_folder_name or "-",
            _when(cave.last_touched_at),
        )

    console.print(table)


@caves_group.command('show')
@click.argument('cave_id')
@pass_obj
def caves_show(ctx: CliContext, cave_id):
    """Show a cave in detail"""
    cave = ctx.registry.get_cave(cave_id)
    if cave is None:
        console.print(f"[red]Cave '{cave_id}' not found[/red]")
        sys.exit(1)

    console.print(f"[bold]Cave {cave.id}[/bold]\n")
    if cave.game:
        console.print(f"  Game: [cyan]{cave.game.title or cave.game.id}[/cyan] ({cave.game.id})")
    if cave.upload:
        console.print(f"  Upload: {format_upload(cave.upload, cave.build)}")

    location = ctx.registry.get_install_location(cave.install_location_id) if cave.install_location_id else None
    if location:
        console.print(f"  Install folder: {cave.install_folder(location)}")
    else:
        console.print(f"  Install location: [yellow]{cave.install_location_id or 'missing'}[/yellow]")
        console.print(f"  Folder name: {cave.install_folder_name or '-'}")

    console.print(f"  Installed: {_when(cave.installed_at)}")
    console.print(f"  Last touched: {_when(cave.last_touched_at)}")


@caves_group.command('remove')
@click.argument('cave_id')
@click.option('--yes', '-y', is_flag=True, help='Skip confirmation')
@pass_obj
def caves_remove(ctx: CliContext, cave_id, yes):
    """Forget a cave (installed files are left in place)"""
    if ctx.registry.get_cave(cave_id) is None:
        console.print(f"[red]Cave '{cave_id}' not found[/red]")
        sys.exit(1)

    if not yes and not click.confirm(f"Remove cave {cave_id} from the registry?"):
        return

    ctx.registry.remove_cave(cave_id)
    console.print(f"[green]✓[/green] Removed cave {cave_id}")
