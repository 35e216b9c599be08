"""
Checks for the external programs tmm drives (tmux, fzf).

``require_*`` only look the binary up on PATH, since they run on every
command. ``tool_status`` also asks each binary for its version and is
what ``tmm config show`` reports.
"""

import re
import shutil
import subprocess
from typing import List, NamedTuple, Optional

from .exceptions import TmuxNotFoundError, SelectorNotFoundError

# tmux -V prints "tmux 3.4" (or "tmux next-3.5"), fzf --version "0.44.1 (d7d2ac3)"
_VERSION_FLAGS = {"tmux": "-V", "fzf": "--version"}
_VERSION_RE = re.compile(r"(\d+(?:\.\d+)*[a-z]?)")


class ToolStatus(NamedTuple):
    name: str
    path: Optional[str]
    version: Optional[str]

    @property
    def available(self) -> bool:
        return self.path is not None


def find_executable(name: str) -> Optional[str]:
    """Find the path to an executable, or None if not on PATH."""
    return shutil.which(name)


def parse_version(output: str) -> Optional[str]:
    match = _VERSION_RE.search(output)
    return match.group(1) if match else None


def get_version(path: str, flag: str) -> Optional[str]:
    """Run ``path flag`` and pull a version number out of its output."""
    try:
        result = subprocess.run([path, flag], capture_output=True, text=True, timeout=5)
    except (subprocess.SubprocessError, OSError):
        return None
    if result.returncode != 0:
        return None
    return parse_version(result.stdout)


def tool_status() -> List[ToolStatus]:
    """Path and version of every external program, in a fixed order."""
    statuses = []
    for name, flag in _VERSION_FLAGS.items():
        path = find_executable(name)
        version = get_version(path, flag) if path else None
        statuses.append(ToolStatus(name, path, version))
    return statuses


def require_tmux() -> str:
    """Ensure tmux is available.

    Raises:
        TmuxNotFoundError: If tmux is not found
    """
    path = find_executable("tmux")
    if not path:
        raise TmuxNotFoundError(
            "tmux is required but not found. "
            "Install it with: brew install tmux (macOS) or apt install tmux (Linux)"
        )
    return path


def require_fzf() -> str:
    """Ensure fzf is available.

    Raises:
        SelectorNotFoundError: If fzf is not found
    """
    path = find_executable("fzf")
    if not path:
        raise SelectorNotFoundError(
            "fzf is required for interactive selection but not found. "
            "Install it with: brew install fzf (macOS) or apt install fzf (Linux)"
        )
    return path
