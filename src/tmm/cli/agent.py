"""
Agent commands: run, keys, tail.

``run`` and ``keys`` inject input into a session's active pane, wait for
the output to settle and print only the lines that appeared. Exit codes:
0 settled, 124 timed out (partial output printed), 1 error.
"""

from typing import Annotated, Callable, List, Optional

import typer
from rich.markup import escape

from ..config import get_settle_config, get_tail_lines
from ..differ import tail_lines
from ..exceptions import UsageError
from ..keys import build_command_line, parse_key_tokens
from ..protocols import PaneAccessor
from ..settle import SettleDetector, SettleOutcome
from ._shared import (
    SEPARATOR_KEY,
    SeparatorCommand,
    SessionArgument,
    app,
    cli_errors,
    console,
    get_tmux,
)


def make_detector(pane: PaneAccessor) -> SettleDetector:
    return SettleDetector(pane, get_settle_config())


def _check_separator(ctx: typer.Context, required: bool) -> Optional[int]:
    """Only the session name may come before ``--``."""
    position = ctx.meta.get(SEPARATOR_KEY)
    if position is None:
        if required:
            raise UsageError("Missing '--' before the command")
    elif position != 1:
        raise UsageError("Only the session name may come before '--'")
    return position


def _reject_options(args: List[str]) -> None:
    # Unknown options are passed through by Click, catch them here
    for arg in args:
        if arg.startswith("-") and len(arg) > 1:
            raise UsageError(f"No such option: {arg} (put literal text after '--')")


def _print_outcome(session: str, description: str, outcome: SettleOutcome, timeout: float) -> None:
    if outcome.timed_out:
        console.print(
            f"[yellow]Timed out after {timeout:g}s waiting for output to settle; "
            f"showing partial output.[/yellow]",
            soft_wrap=True,
        )
    console.print(f"[bold blue]tmm[/bold blue] - {escape(session)} - {escape(description)}", soft_wrap=True)
    for line in outcome.lines:
        typer.echo(line)
    if outcome.timed_out:
        footer = f"timed out after {outcome.elapsed:.1f}s"
    else:
        footer = f"settled in {outcome.elapsed:.1f}s"
    console.print(f"[dim]END - {escape(session)} - {footer}[/dim]", soft_wrap=True)


def _settle_and_report(
    session: str,
    description: str,
    build_action: Callable[[PaneAccessor, str], Callable[[], None]],
) -> None:
    with cli_errors():
        tmux = get_tmux()
        pane_id = tmux.resolve_active_pane(session)
        detector = make_detector(tmux)
        outcome = detector.run(pane_id, build_action(tmux, pane_id))

    _print_outcome(session, description, outcome, detector.config.timeout)
    raise typer.Exit(code=outcome.exit_code)


@app.command(
    cls=SeparatorCommand,
    context_settings={"ignore_unknown_options": True},
)
def run(
    ctx: typer.Context,
    session: SessionArgument,
    command: Annotated[
        Optional[List[str]],
        typer.Argument(help="Command to run, after '--'. A single argument is sent verbatim."),
    ] = None,
):
    """Run a command in a session and print its new output.

    Types the command into the session's active pane, presses Enter and
    waits until the foreground process returns to the shell (up to the
    settle timeout, 5s by default).

    [bold]tmm run api -- make test[/bold]
    [bold]tmm run api -- 'make && make test'[/bold]
    """
    with cli_errors(usage=ctx.get_usage()):
        _check_separator(ctx, required=True)
        command_line = build_command_line(command or [])

    def build_action(tmux: PaneAccessor, pane_id: str) -> Callable[[], None]:
        def action() -> None:
            tmux.send_literal_text(pane_id, command_line)
            tmux.send_submit(pane_id)
        return action

    _settle_and_report(session, f"run: {command_line}", build_action)


@app.command(
    cls=SeparatorCommand,
    context_settings={"ignore_unknown_options": True},
)
def keys(
    ctx: typer.Context,
    session: SessionArgument,
    tokens: Annotated[
        Optional[List[str]],
        typer.Argument(
            metavar="KEYS...",
            help="Key names (C-c, Enter, Escape, Up, ...) or literal text.",
        ),
    ] = None,
):
    """Send keys to a session and print its new output.

    Tokens that are tmux key names (Enter, Tab, C-c, M-x, ...) are sent as
    keys; anything else is typed literally. Enter is never added.

    [bold]tmm keys api C-c[/bold]
    [bold]tmm keys api -- :wq Enter[/bold]
    """
    with cli_errors(usage=ctx.get_usage()):
        if _check_separator(ctx, required=False) is None:
            _reject_options(tokens or [])
        key_tokens = parse_key_tokens(tokens or [])

    def build_action(tmux: PaneAccessor, pane_id: str) -> Callable[[], None]:
        return lambda: tmux.send_key_tokens(pane_id, key_tokens)

    _settle_and_report(session, "keys: " + " ".join(t.value for t in key_tokens), build_action)


@app.command()
def tail(
    ctx: typer.Context,
    session: SessionArgument,
    lines: Annotated[
        Optional[int],
        typer.Option("--lines", "-l", help="Number of lines to print (default 10, or tail_lines from config)."),
    ] = None,
):
    """Print the last lines of a session's active pane."""
    with cli_errors(usage=ctx.get_usage()):
        count = lines if lines is not None else get_tail_lines()
        if count <= 0:
            raise UsageError("--lines must be a positive integer")
        tmux = get_tmux()
        pane_id = tmux.resolve_active_pane(session)
        snapshot = tmux.capture_scrollback(pane_id, count)

    for line in tail_lines(snapshot, count):
        typer.echo(line)
