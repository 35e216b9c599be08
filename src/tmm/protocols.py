"""
Protocol definitions for external collaborators.

These interfaces allow dependency injection for testing, enabling us to
swap the real implementations (libtmux calls, the fzf subprocess) with
in-memory fakes. The settle detector only ever sees a PaneAccessor, so
an alternative "is the action done" signal can be plugged in without
touching it.
"""

from typing import Protocol, Optional, List, Sequence, Tuple, runtime_checkable, TYPE_CHECKING

if TYPE_CHECKING:
    from .keys import KeyToken
    from .sessions import SessionInfo


@runtime_checkable
class PaneAccessor(Protocol):
    """Read/write operations against a session's active pane.

    Every method raises PaneAccessError when tmux fails; callers treat
    that as fatal for the current invocation.
    """

    def resolve_active_pane(self, session: str) -> str:
        """Return the pane id (e.g. ``%3``) of the session's active pane.

        Raises:
            SessionNotFoundError: if no session has exactly this name
        """
        ...

    def capture_scrollback(self, pane_id: str, lines: int) -> List[str]:
        """Capture the last ``lines`` lines of history plus the visible screen.

        Line endings are normalized so identical content compares equal.
        """
        ...

    def current_command(self, pane_id: str) -> str:
        """Name of the pane's foreground process (the shell when idle)."""
        ...

    def send_literal_text(self, pane_id: str, text: str) -> None:
        """Type text into the pane without interpreting key names."""
        ...

    def send_submit(self, pane_id: str) -> None:
        """Press Enter in the pane."""
        ...

    def send_key_tokens(self, pane_id: str, tokens: Sequence["KeyToken"]) -> None:
        """Send key tokens in order. Never appends an implicit Enter."""
        ...


@runtime_checkable
class SessionStore(Protocol):
    """Session-level tmux primitives used by the session commands."""

    def list_sessions(self) -> List["SessionInfo"]:
        """All live sessions. Empty when no tmux server is running."""
        ...

    def new_session(self, name: str) -> None:
        """Create a detached session."""
        ...

    def rename_session(self, old: str, new: str) -> None:
        """Rename a session in place."""
        ...

    def kill_session(self, name: str) -> None:
        """Kill a session."""
        ...

    def attach(self, name: str) -> None:
        """Attach the terminal to a session (replaces current process)."""
        ...

    def switch_client(self, name: str) -> None:
        """Switch the current client to another session (inside tmux)."""
        ...

    def detach_client(self) -> None:
        """Detach the current client."""
        ...

    def current_session(self, pane_id: Optional[str] = None) -> str:
        """Name of the session the given pane (or the current client) is in."""
        ...


@runtime_checkable
class Selector(Protocol):
    """Interactive fuzzy picker."""

    def select(
        self,
        items: Sequence[Tuple[str, str]],
        prompt: str = "",
        multi: bool = False,
    ) -> List[str]:
        """Let the user pick from ``(value, label)`` pairs.

        Returns:
            Selected values; empty if the user cancelled
        """
        ...
