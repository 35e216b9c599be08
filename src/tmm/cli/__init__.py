"""
CLI interface for tmm using Typer.

``tmm <session-name>`` is shorthand for ``tmm open <session-name>`` and
``tmm help <command>`` for ``tmm <command> --help``; both are rewritten
in main() before Typer parses the arguments.
"""

import sys
from typing import List, Optional

import click
import typer

# Shared state (apps, options, utilities) must be imported first
from ._shared import app, main_callback  # noqa: F401

# Import submodules to register their commands with the Typer apps
from . import manage  # noqa: F401
from . import agent  # noqa: F401
from . import config  # noqa: F401


def command_names() -> List[str]:
    group = typer.main.get_command(app)
    return sorted(getattr(group, "commands", {}))


def resolve_help_target(value: str) -> Optional[str]:
    if value in command_names():
        return value
    if value in ("session", "session-name"):
        return "open"
    return None


def normalize_argv(argv: List[str]) -> List[str]:
    """Rewrite the shorthand forms into regular Typer invocations."""
    if not argv:
        return argv
    first = argv[0]
    if first == "help":
        target = resolve_help_target(argv[1]) if len(argv) > 1 else None
        return [target, "--help"] if target else ["--help"]
    if first.startswith("-") or first in command_names():
        return argv
    return ["open", *argv]


def main(argv: Optional[List[str]] = None):
    """Main entry point for the CLI."""
    args = normalize_argv(list(sys.argv[1:] if argv is None else argv))
    try:
        code = app(args=args, prog_name="tmm", standalone_mode=False)
    except click.UsageError as e:
        # Malformed arguments exit 1, not Click's default 2
        e.show()
        sys.exit(1)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        typer.echo("Aborted!", err=True)
        sys.exit(1)
    sys.exit(code or 0)


if __name__ == "__main__":
    main()
