"""
Session commands: open, new, rename, remove, exit, ls, which.
"""

from typing import Annotated, Optional

import typer
from rich import print as rprint
from rich.markup import escape

from ..context import Environment
from ..exceptions import NotInsideTmuxError, SessionExistsError, UsageError
from ..protocols import SessionStore
from ..sessions import SessionResolver, sort_by_activity, validate_session_name
from ._shared import app, cli_errors, get_environment, get_selector, get_tmux, session_label


def _enter_session(tmux: SessionStore, env: Environment, name: str) -> None:
    """Attach from a plain terminal, switch the client from inside tmux."""
    if env.inside_tmux:
        tmux.switch_client(name)
    else:
        tmux.attach(name)


def _pick_session(tmux: SessionStore, prompt: str, multi: bool = False) -> Optional[list]:
    """Let the user pick sessions. None when there is nothing to pick from."""
    sessions = sort_by_activity(tmux.list_sessions())
    if not sessions:
        rprint("[dim]No tmux sessions found[/dim]")
        return None
    items = [(s.name, session_label(s)) for s in sessions]
    return get_selector().select(items, prompt=prompt, multi=multi)


def open_session(name: Optional[str]) -> None:
    """Open a session by name, or pick one interactively."""
    with cli_errors():
        tmux = get_tmux()
        env = get_environment()
        if name is None:
            picked = _pick_session(tmux, "open")
            if not picked:
                return
            name = picked[0]
        else:
            SessionResolver(tmux).resolve(name)
        _enter_session(tmux, env, name)


@app.command("open")
def open_command(
    name: Annotated[
        Optional[str],
        typer.Argument(help="Existing session to open. Omit to select interactively."),
    ] = None,
):
    """Open a tmux session."""
    open_session(name)


@app.command()
def new(
    ctx: typer.Context,
    name: Annotated[Optional[str], typer.Argument(help="Session name to create and open.")] = None,
):
    """Create and open a new tmux session."""
    with cli_errors(usage=ctx.get_usage()):
        if name is None:
            raise UsageError("Missing session name")
        validate_session_name(name)
        tmux = get_tmux()
        env = get_environment()
        if SessionResolver(tmux).exists(name):
            raise SessionExistsError(name)
        tmux.new_session(name)
        _enter_session(tmux, env, name)


@app.command()
def rename(
    ctx: typer.Context,
    first: Annotated[
        Optional[str],
        typer.Argument(
            metavar="[OLD_NAME] NEW_NAME",
            help="New name for the current session, or old and new names.",
            show_default=False,
        ),
    ] = None,
    second: Annotated[Optional[str], typer.Argument(hidden=True)] = None,
):
    """Rename tmux sessions.

    [bold]tmm rename[/bold]             select a session, then enter its new name
    [bold]tmm rename NEW[/bold]         rename the current session (inside tmux)
    [bold]tmm rename OLD NEW[/bold]     rename a specific session
    """
    with cli_errors(usage=ctx.get_usage()):
        tmux = get_tmux()
        env = get_environment()
        resolver = SessionResolver(tmux)

        if first is None:
            picked = _pick_session(tmux, "rename")
            if picked is None:
                return
            if not picked:
                rprint("[dim]No session renamed[/dim]")
                return
            old = picked[0]
            new_name = typer.prompt(f"New name for {old}", default=old)
        elif second is None:
            if not env.inside_tmux:
                raise NotInsideTmuxError(
                    "Not inside a tmux session; use: tmm rename <old-session-name> <new-session-name>"
                )
            old = tmux.current_session(env.tmux_pane)
            new_name = first
        else:
            old, new_name = first, second

        validate_session_name(new_name)
        resolver.resolve(old)
        if new_name == old:
            rprint("[dim]Name unchanged[/dim]")
            return
        if resolver.exists(new_name):
            raise SessionExistsError(new_name)
        tmux.rename_session(old, new_name)
        rprint(f"[green]Renamed:[/green] {escape(old)} -> {escape(new_name)}")


@app.command()
def remove(
    name: Annotated[
        Optional[str],
        typer.Argument(help="Session to remove. Omit to choose multiple interactively."),
    ] = None,
):
    """Remove tmux sessions."""
    with cli_errors():
        tmux = get_tmux()
        if name is not None:
            SessionResolver(tmux).resolve(name)
            targets = [name]
        else:
            targets = _pick_session(tmux, "remove", multi=True)
            if targets is None:
                return
            if not targets:
                rprint("[dim]No sessions removed[/dim]")
                return

        for target in targets:
            tmux.kill_session(target)
            rprint(f"[red]Removed: {escape(target)}[/red]")


@app.command("exit")
def exit_session(
    ctx: typer.Context,
    detach: Annotated[
        bool, typer.Option("--detach", "-d", help="Detach from the current session and keep it running.")
    ] = False,
    kill: Annotated[
        bool, typer.Option("--kill", "-k", help="Kill the current session.")
    ] = False,
):
    """Exit the current tmux session.

    Without options, prompts to detach or detach-and-remove.
    """
    with cli_errors(usage=ctx.get_usage()):
        if detach and kill:
            raise UsageError("--detach and --kill cannot be combined")
        env = get_environment()
        if not env.inside_tmux:
            raise NotInsideTmuxError()
        tmux = get_tmux()
        current = tmux.current_session(env.tmux_pane)

        if not detach and not kill:
            choice = get_selector().select(
                [
                    ("detach", "Detach (keep session running)"),
                    ("remove", f"Detach and remove {current}"),
                ],
                prompt="exit",
            )
            if not choice:
                return
            kill = choice[0] == "remove"

        if kill:
            # Killing the session detaches every client attached to it
            tmux.kill_session(current)
        else:
            tmux.detach_client()


@app.command("ls")
def list_sessions():
    """List tmux session names."""
    with cli_errors():
        tmux = get_tmux()
        for session in tmux.list_sessions():
            typer.echo(session.name)


@app.command()
def which():
    """Show current tmux session name."""
    with cli_errors():
        env = get_environment()
        if not env.inside_tmux:
            raise NotInsideTmuxError()
        tmux = get_tmux()
        typer.echo(tmux.current_session(env.tmux_pane))
