"""Catalog authentication and download key commands for cavectl CLI."""

import sys

import click
from rich.console import Console
from rich.table import Table

from cavectl_core import CatalogAPI, CatalogApiError
from cavectl_core.auth import load_api_key, save_api_key, delete_api_key

from ..context import CliContext

console = Console()
pass_obj = click.pass_obj


@click.command()
@click.option('--key', '-k', 'api_key', help='Paste your catalog API key')
@click.option('--no-verify', is_flag=True, help='Store the key without checking it')
@pass_obj
def login(ctx: CliContext, api_key, no_verify):
    """Store the catalog API key

    Example:
        cavectl login --key <your-key>
    """
    store = ctx.auth_store

    existing = load_api_key(store)
    if existing and not api_key:
        console.print("[yellow]Already logged in.[/yellow]")
        if not click.confirm("Replace the stored key?"):
            return

    if not api_key:
        api_key = click.prompt("Paste your API key", hide_input=True)

    if not api_key or not api_key.strip():
        console.print("[red]Error: API key cannot be empty[/red]")
        sys.exit(1)

    api_key = api_key.strip()

    if not no_verify:
        with console.status("Validating key..."):
            try:
                with CatalogAPI(
                    api_key=api_key,
                    base_url=ctx.config.catalog_base_url,
                    timeout_s=ctx.config.catalog_timeout_seconds,
                ) as api:
                    user = api.get_profile()
            except CatalogApiError as e:
                console.print(f"[red]Error: Invalid API key - {e}[/red]")
                sys.exit(1)
    else:
        user = {}

    try:
        where = save_api_key(api_key, store)
    except (ValueError, RuntimeError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print("[green]✓[/green] Logged in")
    name = user.get('display_name') or user.get('username')
    if name:
        console.print(f"  Welcome, {name}!")
    console.print(f"[dim]Key stored in {where}[/dim]")


@click.command()
@pass_obj
def logout(ctx: CliContext):
    """Forget the stored catalog API key"""
    store = ctx.auth_store
    if not load_api_key(store):
        console.print("[yellow]Not logged in[/yellow]")
        return

    delete_api_key(store)
    console.print("[green]✓[/green] Logged out")
    if ctx.config.get('api_key'):
        console.print("[dim]Note: api_key is still set in the config file[/dim]")


@click.group('keys', invoke_without_command=True)
@click.pass_context
def keys_group(click_ctx):
    """Manage download keys used to reach purchased games"""
    if click_ctx.invoked_subcommand is None:
        click_ctx.invoke(keys_list)


@keys_group.command('add')
@click.argument('game_id', type=int)
@click.argument('key_id', type=int)
@pass_obj
def keys_add(ctx: CliContext, game_id, key_id):
    """Record the download key for a game"""
    ctx.registry.add_download_key(game_id, key_id)
    console.print(f"[green]✓[/green] Download key {key_id} recorded for game {game_id}")


@keys_group.command('list')
@pass_obj
def keys_list(ctx: CliContext):
    """List recorded download keys"""
    keys = ctx.registry.list_download_keys()
    if not keys:
        console.print("[yellow]No download keys recorded.[/yellow]")
        return

    table = Table()
    table.add_column("Game", style="cyan", justify="right")
    table.add_column("Download key", justify="right")
    for game_id, key_id in sorted(keys.items()):
        table.add_row(str(game_id), str(key_id))
    console.print(table)
