"""
Settle detection: decide when output from injected input is complete.

After typing into a live pane there is no exit status to wait on, so
completion is inferred from the pane's foreground process. The detector
records the foreground command before the action (normally the idle
shell), performs the action once, then polls:

    Idle -> Mutating -> Watching -> Settled | TimedOut

* foreground differs from the baseline: something is running, so the
  stability timer resets
* foreground equals the baseline, no change was ever seen, and the
  grace period has not elapsed: keep waiting (fast commands may finish
  before a different foreground process is ever observed)
* otherwise the pane is back at baseline; once that holds for the
  stability window the output is settled

The deadline is checked once per tick, so timeout granularity is the
poll interval. A timed out cycle still returns the partial output.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from .differ import diff_snapshots
from .protocols import PaneAccessor

logger = logging.getLogger(__name__)


class SettleState(Enum):
    IDLE = "idle"
    MUTATING = "mutating"
    WATCHING = "watching"
    SETTLED = "settled"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class SettleConfig:
    """Timing parameters, in seconds."""
    timeout: float = 5.0
    stable: float = 0.5
    grace: float = 0.25
    poll_interval: float = 0.1
    history_lines: int = 50000


@dataclass
class SettleOutcome:
    """Result of one settle cycle."""
    lines: List[str]
    timed_out: bool
    elapsed: float = 0.0
    baseline_command: str = ""
    saw_change: bool = False
    states: List[SettleState] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 124 if self.timed_out else 0


class SettleDetector:
    """Runs one mutate-and-watch cycle against a pane.

    Args:
        pane: Pane accessor used for captures and foreground reads
        config: Timing parameters
        clock: Monotonic clock in seconds (injectable for tests)
        sleep: Sleep function (injectable for tests)
    """

    def __init__(
        self,
        pane: PaneAccessor,
        config: Optional[SettleConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.pane = pane
        self.config = config or SettleConfig()
        self._clock = clock
        self._sleep = sleep
        self.state = SettleState.IDLE
        self._history: List[SettleState] = []

    def _enter(self, state: SettleState) -> None:
        logger.debug("settle: %s -> %s", self.state.value, state.value)
        self.state = state
        self._history.append(state)

    def run(self, pane_id: str, action: Callable[[], None]) -> SettleOutcome:
        """Capture, perform ``action`` exactly once, wait, capture, diff.

        PaneAccessError from any step propagates; nothing is retried.
        """
        cfg = self.config
        self.state = SettleState.IDLE
        self._history = [SettleState.IDLE]

        before = self.pane.capture_scrollback(pane_id, cfg.history_lines)
        baseline = self.pane.current_command(pane_id)
        logger.debug("settle: baseline command %r, %d lines before", baseline, len(before))

        self._enter(SettleState.MUTATING)
        started = self._clock()
        action()

        self._enter(SettleState.WATCHING)
        saw_change = False
        stable_since: Optional[float] = None
        elapsed = 0.0

        while True:
            remaining = cfg.timeout - (self._clock() - started)
            self._sleep(max(0.0, min(cfg.poll_interval, remaining)))
            now = self._clock()
            elapsed = now - started
            command = self.pane.current_command(pane_id)
            logger.debug("settle: poll at %.3fs, foreground %r", elapsed, command)

            if command != baseline:
                if not saw_change:
                    logger.debug("settle: foreground changed to %r at %.3fs", command, elapsed)
                saw_change = True
                stable_since = None
            elif saw_change or elapsed >= cfg.grace:
                if stable_since is None:
                    stable_since = now
                if now - stable_since >= cfg.stable:
                    self._enter(SettleState.SETTLED)
                    break

            if elapsed >= cfg.timeout:
                self._enter(SettleState.TIMED_OUT)
                break

        after = self.pane.capture_scrollback(pane_id, cfg.history_lines)
        lines = diff_snapshots(before, after)
        timed_out = self.state is SettleState.TIMED_OUT
        logger.debug(
            "settle: %s after %.3fs with %d new lines",
            self.state.value, elapsed, len(lines),
        )
        return SettleOutcome(
            lines=lines,
            timed_out=timed_out,
            elapsed=elapsed,
            baseline_command=baseline,
            saw_change=saw_change,
            states=list(self._history),
        )
