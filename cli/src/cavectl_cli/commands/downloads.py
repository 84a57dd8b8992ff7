"""Download queue commands for cavectl CLI."""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from cavectl_core.install_queue import load_job
from cavectl_core.job import InstallQueueResult
from cavectl_core.job_context import CONTEXT_FILE_NAME, JobContext
from cavectl_core.prepare import PREPARE_SECTION
from cavectl_core.uploads import format_upload

from ..context import CliContext

console = Console()
pass_obj = click.pass_obj


@click.group('downloads', invoke_without_command=True)
@click.pass_context
def downloads_group(click_ctx):
    """Inspect the download queue"""
    if click_ctx.invoked_subcommand is None:
        click_ctx.invoke(downloads_list)


@downloads_group.command('list')
@click.option('--all', '-a', 'include_finished', is_flag=True, help='Include finished downloads')
@pass_obj
def downloads_list(ctx: CliContext, include_finished):
    """List queued downloads"""
    downloads = ctx.downloads.list(include_finished=include_finished)
    if not downloads:
        console.print("[yellow]Download queue is empty.[/yellow]")
        return

    table = Table()
    table.add_column("#", justify="right", style="dim")
    table.add_column("Job", style="cyan")
    table.add_column("Game")
    table.add_column("Upload")
    table.add_column("Reason")
    table.add_column("Status")

    for download in downloads:
        item = download.item
        table.add_row(
            str(download.position),
            download.id,
            item.game.title or str(item.game.id),
            format_upload(item.upload, item.build),
            item.reason,
            "[green]finished[/green]" if download.is_finished else "queued",
        )

    console.print(table)


@downloads_group.command('show')
@click.argument('download_id')
@pass_obj
def downloads_show(ctx: CliContext, download_id):
    """Show a queued download and how it will be installed"""
    matches = [d for d in ctx.downloads.list(include_finished=True) if d.id == download_id]
    if not matches:
        console.print(f"[red]Download '{download_id}' not found[/red]")
        sys.exit(1)

    item = matches[0].item
    console.print(f"[bold]Download {item.id}[/bold]\n")
    console.print(f"  Game: [cyan]{item.game.title or item.game.id}[/cyan]")
    console.print(f"  Upload: {format_upload(item.upload, item.build)}")
    if item.cave_id:
        console.print(f"  Cave: {item.cave_id}")
    console.print(f"  Install folder: {item.install_folder}")
    console.print(f"  Staging folder: [dim]{item.staging_folder}[/dim]")
    console.print(f"  Reason: {item.reason}")

    staging = Path(item.staging_folder)
    if not (staging / CONTEXT_FILE_NAME).exists():
        console.print("\n[yellow]Staging folder is gone, the job cannot be resumed[/yellow]")
        return

    with JobContext.load(staging) as job_context:
        prepared = job_context.get(PREPARE_SECTION)
    if prepared:
        console.print(f"  Strategy: {prepared.get('strategy')}")


@downloads_group.command('discard')
@click.argument('download_id')
@pass_obj
def downloads_discard(ctx: CliContext, download_id):
    """Remove a download from the queue"""
    if not ctx.downloads.discard(download_id):
        console.print(f"[red]Download '{download_id}' not found[/red]")
        sys.exit(1)
    console.print(f"[green]✓[/green] Discarded {download_id}")


@downloads_group.command('finish')
@click.argument('download_id')
@pass_obj
def downloads_finish(ctx: CliContext, download_id):
    """Mark a download as finished"""
    if not ctx.downloads.mark_finished(download_id):
        console.print(f"[red]Download '{download_id}' not found[/red]")
        sys.exit(1)
    console.print(f"[green]✓[/green] Marked {download_id} as finished")


@downloads_group.command('clear')
@pass_obj
def downloads_clear(ctx: CliContext):
    """Remove finished downloads from the queue"""
    count = ctx.downloads.clear_finished()
    console.print(f"[green]✓[/green] Cleared {count} finished download(s)")


@downloads_group.command('requeue')
@click.argument('staging_folder', type=click.Path(file_okay=False, path_type=Path))
@pass_obj
def downloads_requeue(ctx: CliContext, staging_folder):
    """Queue a prepared job again from its staging folder"""
    job = load_job(staging_folder)
    if job is None:
        console.print(f"[red]No install job saved in {staging_folder}[/red]")
        sys.exit(1)

    ctx.downloads.queue(InstallQueueResult.from_job(job))
    console.print(f"[green]✓[/green] Queued {job.id}")
