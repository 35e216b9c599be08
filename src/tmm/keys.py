"""
Key tokens and command-line building for the run/keys commands.
"""

import re
import shlex
from dataclasses import dataclass
from typing import List, Sequence

from .exceptions import UsageError


NAMED_KEYS = frozenset({
    "Enter", "Escape", "Tab", "BTab", "Space", "BSpace",
    "Up", "Down", "Left", "Right", "Home", "End",
    "PageUp", "PgUp", "PPage", "PageDown", "PgDn", "NPage",
    "Insert", "IC", "Delete", "DC",
    *(f"F{i}" for i in range(1, 13)),
})

# C-c, M-x, S-Tab, C-M-a ...
_CHORD_RE = re.compile(r"^(?:[CMS]-)+(\S+)$")


@dataclass(frozen=True)
class KeyToken:
    """One unit of key input: literal text or a tmux key name."""
    value: str
    literal: bool

    def __str__(self) -> str:
        return self.value


def is_named_key(token: str) -> bool:
    """Return True if token is a tmux key name or modifier chord."""
    if token in NAMED_KEYS:
        return True
    match = _CHORD_RE.match(token)
    if match:
        base = match.group(1)
        return len(base) == 1 or base in NAMED_KEYS
    return False


def parse_key_tokens(tokens: Sequence[str]) -> List[KeyToken]:
    """Classify raw CLI tokens as named keys or literal text."""
    if not tokens:
        raise UsageError("No keys given")
    return [KeyToken(value=t, literal=not is_named_key(t)) for t in tokens]


def build_command_line(args: Sequence[str]) -> str:
    """Build the shell line typed into the pane.

    A single argument is used verbatim so shell operators survive
    (``tmm run api -- 'make && make test'``). Several arguments are
    quoted individually.
    """
    if not args:
        raise UsageError("No command given")
    if len(args) == 1:
        return args[0]
    return " ".join(shlex.quote(a) for a in args)
