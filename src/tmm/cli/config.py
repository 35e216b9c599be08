"""
Config commands: init, show, path.
"""

from typing import Annotated

import typer
from rich import print as rprint
from rich.markup import escape

from ._shared import config_app


@config_app.callback(invoke_without_command=True)
def config_default(ctx: typer.Context):
    """Show current configuration (default when no subcommand given)."""
    if ctx.invoked_subcommand is None:
        _config_show()


@config_app.command("init")
def config_init(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite existing config file")
    ] = False,
):
    """Create a config file with documented defaults.

    Creates ~/.tmm/config.yaml with all options commented out.
    Use --force to overwrite an existing config file.
    """
    from ..config import CONFIG_TEMPLATE, get_config_path

    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.exists() and not force:
        rprint(f"[yellow]Config file already exists:[/yellow] {escape(str(path))}")
        rprint("[dim]Use --force to overwrite[/dim]")
        raise typer.Exit(1)

    path.write_text(CONFIG_TEMPLATE)
    rprint(f"[green]✓[/green] Created config file: [bold]{escape(str(path))}[/bold]")
    rprint("[dim]Edit to customize your settings[/dim]")


@config_app.command("show")
def config_show():
    """Show current configuration."""
    _config_show()


def _config_show():
    """Internal function to display the effective config."""
    from ..config import (
        get_config_path,
        get_fzf_options,
        get_settle_config,
        get_tail_lines,
        get_tmux_socket,
        load_config,
    )
    from ..dependency_check import tool_status

    path = get_config_path()
    if not path.exists():
        rprint(f"[dim]No config file found at {escape(str(path))} (using defaults)[/dim]")
        rprint("[dim]Run 'tmm config init' to create one[/dim]")
    else:
        rprint(f"[bold]Configuration[/bold] ({escape(str(path))}):")

    config = load_config()
    settle = get_settle_config(config)
    rprint("")
    rprint(f"  tmux_socket: {escape(get_tmux_socket(config) or 'default')}")
    rprint(f"  tail_lines: {get_tail_lines(config)}")
    rprint("  settle:")
    rprint(f"    timeout_ms: {settle.timeout * 1000:g}")
    rprint(f"    stable_ms: {settle.stable * 1000:g}")
    rprint(f"    grace_ms: {settle.grace * 1000:g}")
    rprint(f"    poll_ms: {settle.poll_interval * 1000:g}")
    rprint(f"    history_lines: {settle.history_lines}")
    options = get_fzf_options(config)
    if options:
        rprint(f"  fzf.options: {escape(' '.join(options))}")

    rprint("")
    rprint("[bold]Tools[/bold]:")
    for tool in tool_status():
        if tool.available:
            version = tool.version or "unknown version"
            rprint(f"  {tool.name}: {escape(version)} ({escape(tool.path)})")
        else:
            rprint(f"  {tool.name}: [red]not found[/red]")


@config_app.command("path")
def config_path():
    """Show the config file path."""
    from ..config import get_config_path
    print(get_config_path())
