"""
Output differ: isolate the lines a pane produced between two captures.

Scrollback is append-mostly, so the new output is whatever follows the
longest common prefix of the two snapshots. When heavy output scrolls
the start of the window away between captures, the prefix breaks early
and more lines than are truly new get reported; that approximation is
accepted.
"""

from typing import List, Sequence


def trim_trailing_blank(lines: Sequence[str]) -> List[str]:
    """Drop trailing lines that are empty or whitespace-only."""
    end = len(lines)
    while end > 0 and not lines[end - 1].strip():
        end -= 1
    return list(lines[:end])


def diff_snapshots(before: Sequence[str], after: Sequence[str]) -> List[str]:
    """Return the lines of ``after`` from the first point of divergence.

    Args:
        before: Snapshot captured before the action
        after: Snapshot captured once output settled (or timed out)

    Returns:
        New lines, with trailing blank lines trimmed
    """
    common = 0
    for old, new in zip(before, after):
        if old != new:
            break
        common += 1
    return trim_trailing_blank(after[common:])


def tail_lines(snapshot: Sequence[str], count: int) -> List[str]:
    """Last ``count`` lines of a snapshot, ignoring blank screen padding."""
    trimmed = trim_trailing_blank(snapshot)
    if count <= 0:
        return []
    return trimmed[-count:]
