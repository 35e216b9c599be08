"""
Exception hierarchy for tmm.

Every error the CLI reports to the user derives from TmmError; the
dispatcher turns these into a one-line message and exit code 1.
"""


class TmmError(Exception):
    """Base class for all tmm errors."""


class TmuxNotFoundError(TmmError):
    """The tmux executable is not installed."""


class SelectorNotFoundError(TmmError):
    """The fzf executable is not installed."""


class SelectorError(TmmError):
    """The fuzzy selector exited abnormally."""


class SessionNotFoundError(TmmError):
    """A named session does not exist at resolution time."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Session not found: {name}")


class SessionExistsError(TmmError):
    """A session with the requested name already exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Session already exists: {name}")


class PaneAccessError(TmmError):
    """A read or write against tmux failed (server gone, pane vanished...)."""


class UsageError(TmmError):
    """Malformed command-line arguments."""


class NotInsideTmuxError(TmmError):
    """A command that acts on the current session ran outside tmux."""

    def __init__(self, message: str = "Not inside a tmux session"):
        super().__init__(message)
