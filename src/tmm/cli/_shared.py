"""
Shared CLI state: Typer apps, consoles, factories and the error boundary.
"""

from contextlib import contextmanager
from typing import Annotated, Iterator, List, Optional

import click
import typer
from rich.console import Console
from rich.markup import escape
from rich.text import Text
from typer.core import TyperCommand

from ..config import get_fzf_options, get_tmux_socket
from ..context import Environment
from ..dependency_check import require_fzf, require_tmux
from ..exceptions import TmmError, UsageError
from ..implementations import RealSelector, RealTmux
from ..logging_config import setup_cli_logging
from ..sessions import SessionInfo

# Main app
app = typer.Typer(
    name="tmm",
    help="tmux session manager",
    no_args_is_help=False,
    invoke_without_command=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Config subcommand group
config_app = typer.Typer(
    name="config",
    help="Manage configuration",
    no_args_is_help=False,
    invoke_without_command=True,
)
app.add_typer(config_app, name="config")

# Console for rich output; pane lines are written with typer.echo
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

# Renders fzf labels to ANSI regardless of whether stdout is a terminal
_label_console = Console(force_terminal=True, color_system="standard", highlight=False)

SEPARATOR_KEY = "tmm.separator"

SessionArgument = Annotated[str, typer.Argument(help="Target session name.")]


class SeparatorCommand(TyperCommand):
    """Command that records where ``--`` appeared in its arguments.

    Click consumes the separator while parsing, so the number of
    arguments before it (None when absent) is noted in ``ctx.meta``
    before the arguments are handed over.
    """

    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        ctx.meta[SEPARATOR_KEY] = args.index("--") if "--" in args else None
        return super().parse_args(ctx, args)


def get_environment() -> Environment:
    return Environment.from_environ()


def get_tmux() -> RealTmux:
    require_tmux()
    return RealTmux(socket_name=get_tmux_socket())


def get_selector() -> RealSelector:
    require_fzf()
    return RealSelector(options=get_fzf_options())


def session_label(session: SessionInfo) -> str:
    """fzf label: ``name (Jan 5, 3:04 PM)`` with the date dimmed.

    Sessions with a client attached get a green ``attached`` marker.
    """
    text = Text(session.name)
    text.append(f" ({session.activity_label})", style="dim")
    if session.attached:
        text.append(" attached", style="green")
    with _label_console.capture() as capture:
        _label_console.print(text, end="", soft_wrap=True)
    return capture.get()


@contextmanager
def cli_errors(usage: Optional[str] = None) -> Iterator[None]:
    """Turn TmmError into a one-line message on stderr and exit code 1."""
    try:
        yield
    except UsageError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        if usage:
            err_console.print(escape(usage), soft_wrap=True)
        raise typer.Exit(code=1)
    except TmmError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]", soft_wrap=True)
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log tmux calls and settle decisions to stderr")
    ] = False,
):
    """tmux session manager.

    Run without a command to pick a session and open it.
    """
    setup_cli_logging(verbose)
    if ctx.invoked_subcommand is None:
        from .manage import open_session

        open_session(None)
