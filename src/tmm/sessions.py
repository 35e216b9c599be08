"""
Session model, labels and name resolution.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from .exceptions import SessionNotFoundError, UsageError
from .protocols import SessionStore

# tmux rewrites these characters in session names
_FORBIDDEN_NAME_CHARS = (".", ":")


@dataclass(frozen=True)
class SessionInfo:
    """A live tmux session as listed by the server."""
    name: str
    activity: int = 0  # unix timestamp of last activity
    attached: bool = False

    @property
    def activity_label(self) -> str:
        return format_activity(self.activity)


def format_activity(timestamp: int) -> str:
    """Format a unix timestamp like ``Jan 5, 3:04 PM``."""
    when = datetime.fromtimestamp(timestamp)
    hour = when.hour % 12 or 12
    meridiem = "AM" if when.hour < 12 else "PM"
    return f"{when.strftime('%b')} {when.day}, {hour}:{when.minute:02d} {meridiem}"


def sort_by_activity(sessions: List[SessionInfo]) -> List[SessionInfo]:
    """Most recently active first; ties keep tmux's order."""
    return sorted(sessions, key=lambda s: s.activity, reverse=True)


def validate_session_name(name: Optional[str]) -> str:
    """Reject names tmux would refuse or silently rewrite."""
    if name is None or not name.strip():
        raise UsageError("Session name must not be empty")
    for char in _FORBIDDEN_NAME_CHARS:
        if char in name:
            raise UsageError(f"Session name must not contain '{char}': {name}")
    return name


class SessionResolver:
    """Map a user-supplied name onto a live session.

    The session list is read from tmux on every call; names are unique
    on the server, so an exact case-sensitive match is unambiguous.
    """

    def __init__(self, store: SessionStore):
        self.store = store

    def find(self, name: str) -> Optional[SessionInfo]:
        for session in self.store.list_sessions():
            if session.name == name:
                return session
        return None

    def resolve(self, name: str) -> SessionInfo:
        session = self.find(name)
        if session is None:
            raise SessionNotFoundError(name)
        return session

    def exists(self, name: str) -> bool:
        return self.find(name) is not None
