"""Configuration management commands for cavectl CLI."""

import sys

import click
from rich.console import Console
import yaml

from ..context import CliContext

console = Console()
pass_obj = click.pass_obj


def _redact(value):
    if not value:
        return value
    return value[:4] + '...' + value[-4:] if len(value) > 12 else '***'


def _parse_value(value: str):
    """Turn a command-line string into a bool, null, int, float or str"""
    lowered = value.lower()
    if lowered == 'true':
        return True
    if lowered == 'false':
        return False
    if lowered in ('null', 'none'):
        return None
    if value.isdigit():
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value


@click.group('config', invoke_without_command=True)
@click.pass_context
def config_group(click_ctx):
    """Manage cavectl configuration settings"""
    if click_ctx.invoked_subcommand is None:
        click_ctx.invoke(config_show)


@config_group.command('show')
@click.option('--key', '-k', help='Show specific config key')
@pass_obj
def config_show(ctx: CliContext, key):
    """Show current configuration"""
    if key:
        value = ctx.config.get(key)
        if value is None:
            console.print(f"[yellow]Key '{key}' not found[/yellow]")
        else:
            if key == 'api_key':
                value = _redact(value)
            console.print(f"[bold]{key}:[/bold] {value}")
        return

    console.print("[bold]cavectl Configuration[/bold]\n")
    console.print(f"Config file: {ctx.config.config_path}")
    console.print(f"Data directory: {ctx.config.data_dir}\n")

    config_dict = dict(ctx.config._config)
    if config_dict.get('api_key'):
        config_dict['api_key'] = _redact(config_dict['api_key'])

    console.print(yaml.dump(config_dict, default_flow_style=False, sort_keys=False))


@config_group.command('set')
@click.argument('key')
@click.argument('value')
@pass_obj
def config_set(ctx: CliContext, key, value):
    """Set a configuration value

    Examples:
        cavectl config set install.platform linux
        cavectl config set install.queue_download true
        cavectl config set catalog.timeout_seconds 60
    """
    value = _parse_value(value)
    ctx.config.set(key, value)
    shown = _redact(value) if key == 'api_key' else value
    console.print(f"[green]✓[/green] Set {key} = {shown}")


@config_group.command('get')
@click.argument('key')
@pass_obj
def config_get(ctx: CliContext, key):
    """Get a configuration value"""
    value = ctx.config.get(key)
    if value is None:
        console.print(f"[yellow]Key '{key}' not found[/yellow]")
        sys.exit(1)
    console.print(value)


@config_group.command('path')
@pass_obj
def config_path(ctx: CliContext):
    """Show configuration file path"""
    console.print(ctx.config.config_path)


@config_group.command('init')
@click.option('--force', '-f', is_flag=True, help='Overwrite existing config')
@pass_obj
def config_init(ctx: CliContext, force):
    """Create config file with defaults"""
    if ctx.config.config_path.exists() and not force:
        console.print(f"[yellow]Config file already exists:[/yellow] {ctx.config.config_path}")
        console.print("[dim]Use --force to overwrite with defaults[/dim]")
        return

    ctx.config.save()
    console.print(f"[green]✓[/green] Created config file: {ctx.config.config_path}")
