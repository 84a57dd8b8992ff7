"""Install command for cavectl CLI."""

import sys
from typing import List

import click
from rich.console import Console
from rich.table import Table

from cavectl_core import (
    Game,
    Upload,
    Build,
    InstallRequest,
    InstallQueueError,
    OperationAbortedError,
    CatalogApiError,
    run_guarded,
)
from cavectl_core.access import access_for_game
from cavectl_core.install_queue import default_client_factory
from cavectl_core.job import REASONS
from cavectl_core.prompts import (
    PickUploadResult,
    ExternalUploadResult,
    FirstUploadChooser,
    StaticConfirmer,
)
from cavectl_core.uploads import format_upload

from ..context import CliContext

console = Console()
pass_obj = click.pass_obj


class TerminalUploadChooser:
    """Ask the user to pick an upload from a table"""

    def pick_upload(self, uploads: List[Upload]) -> PickUploadResult:
        table = Table(title="Several uploads are available")
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Upload")

        for i, upload in enumerate(uploads, 1):
            table.add_row(str(i), format_upload(upload, upload.build))

        console.print(table)
        choice = click.prompt(
            "Pick an upload (0 to cancel)",
            type=click.IntRange(0, len(uploads)),
            default=1,
        )
        return PickUploadResult(index=choice - 1)


class TerminalConfirmer:
    """Warn about external uploads and ask before going on"""

    def confirm_external_upload(self, upload: Upload) -> ExternalUploadResult:
        console.print(
            f"[yellow]Upload {format_upload(upload)} is hosted outside the catalog.[/yellow]\n"
            "[dim]It may be a link to another store, may not be installable, "
            "and cannot be updated automatically.[/dim]"
        )
        return ExternalUploadResult(accept=click.confirm("Install it anyway?", default=False))


def _fetch_upload(ctx: CliContext, game_id, cave_id, upload_id) -> Upload:
    """Turn an --upload ID into a full upload from the catalog"""
    if game_id is None:
        cave = ctx.registry.get_cave(cave_id)
        if cave is None or cave.game is None:
            console.print(f"[red]Error: Cave not found ({cave_id})[/red]")
            sys.exit(1)
        game_id = cave.game.id

    try:
        access = access_for_game(ctx.registry, ctx.config, game_id)
        with default_client_factory(ctx.config)(access.api_key) as client:
            uploads = client.list_game_uploads(game_id, access.credentials)
    except (InstallQueueError, CatalogApiError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    for upload in uploads:
        if upload.id == upload_id:
            return upload

    console.print(f"[red]Error: Upload {upload_id} not found for game {game_id}[/red]")
    sys.exit(1)


@click.command()
@click.argument('game_id', type=int, required=False)
@click.option('--cave', 'cave_id', help='Existing cave to install into')
@click.option('--location', '-l', 'location_id', help='Install location for a new cave')
@click.option('--upload', 'upload_id', type=int, help='Upload to install (default: ask)')
@click.option('--build', 'build_id', type=int, help='Build to install (default: latest)')
@click.option('--no-cave', is_flag=True, help='Install without recording a cave')
@click.option('--staging-folder', type=click.Path(file_okay=False), help='Staging folder (with --no-cave)')
@click.option('--install-folder', type=click.Path(file_okay=False), help='Install folder (with --no-cave)')
@click.option('--reason', type=click.Choice(REASONS), default=None, help='Why this install is happening')
@click.option('--queue/--no-queue', 'queue_download', default=None, help='Queue the download right away')
@click.option('--yes', '-y', is_flag=True, help='Pick the first upload and accept external uploads')
@pass_obj
def install(ctx: CliContext, game_id, cave_id, location_id, upload_id, build_id, no_cave,
            staging_folder, install_folder, reason, queue_download, yes):
    """Resolve and prepare an install job.

    \b
    Examples:
        cavectl install 42 --location main
        cavectl install --cave 1c0e... --reason reinstall
        cavectl install 42 --upload 1001 --no-cave --staging-folder /tmp/s --install-folder /tmp/i
    """
    if game_id is None and not cave_id:
        console.print("[red]Error: GAME_ID or --cave required[/red]")
        sys.exit(1)

    if not no_cave and not cave_id and not location_id:
        location_id = ctx.config.default_install_location

    if queue_download is None:
        queue_download = ctx.config.queue_download

    upload = None
    if upload_id is not None:
        upload = _fetch_upload(ctx, game_id, cave_id, upload_id)

    request = InstallRequest(
        game=Game(id=game_id) if game_id is not None else None,
        cave_id=cave_id,
        install_location_id=location_id,
        upload=upload,
        build=Build(id=build_id) if build_id is not None else None,
        staging_folder=staging_folder,
        install_folder=install_folder,
        no_cave=no_cave,
        reason=reason or "",
        queue_download=queue_download,
    )

    if yes or not ctx.config.confirm_external:
        confirmer = StaticConfirmer(accept=True)
    else:
        confirmer = TerminalConfirmer()
    chooser = FirstUploadChooser() if yes else TerminalUploadChooser()

    queue = ctx.get_install_queue(chooser, confirmer)

    try:
        result = run_guarded(queue.queue, request)
    except OperationAbortedError:
        console.print("[yellow]Install cancelled[/yellow]")
        sys.exit(1)
    except (InstallQueueError, CatalogApiError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print()
    console.print("[bold green]Install job ready![/bold green]")
    console.print(f"  Job: [cyan]{result.id}[/cyan]")
    if result.cave_id:
        console.print(f"  Cave: [cyan]{result.cave_id}[/cyan]")
    console.print(f"  Game: [cyan]{result.game.title or result.game.id}[/cyan]")
    console.print(f"  Upload: {format_upload(result.upload, result.build)}")
    console.print(f"  Install folder: {result.install_folder}")
    console.print(f"  Staging folder: [dim]{result.staging_folder}[/dim]")
    console.print(f"  Reason: {result.reason}")

    if queue_download:
        console.print("\n[green]✓[/green] Queued for download")
    else:
        console.print("\n[dim]Not queued. Use --queue to queue the download.[/dim]")
