"""Tests for the settle detector."""

import pytest

from tmm.exceptions import PaneAccessError
from tmm.keys import KeyToken
from tmm.settle import SettleConfig, SettleDetector, SettleOutcome, SettleState

from fixtures import create_shell_session


def make_detector(tmux, clock, **overrides):
    config = SettleConfig(**overrides)
    return SettleDetector(tmux, config, clock=clock, sleep=clock.sleep)


def run_command(tmux, pane_id, command):
    def action():
        tmux.send_literal_text(pane_id, command)
        tmux.send_submit(pane_id)
    return action


class TestFastCommands:
    """Commands that finish before a foreground change is ever visible."""

    def test_echo_settles_after_grace_period(self, mock_tmux, clock):
        create_shell_session(mock_tmux, clock)
        detector = make_detector(mock_tmux, clock)

        outcome = detector.run("%0", run_command(mock_tmux, "%0", "echo hi"))

        assert outcome.timed_out is False
        assert outcome.lines == ["$ echo hi", "hi", "$ "]
        assert outcome.baseline_command == "bash"
        assert outcome.saw_change is False

    def test_settles_at_or_after_grace_and_well_before_deadline(self, mock_tmux, clock):
        create_shell_session(mock_tmux, clock)
        detector = make_detector(mock_tmux, clock)

        outcome = detector.run("%0", run_command(mock_tmux, "%0", "echo hi"))

        # grace (0.25) + stability window (0.5), to poll granularity
        assert outcome.elapsed >= 0.25 + 0.5 - 1e-9
        assert outcome.elapsed < 1.0
        assert outcome.exit_code == 0

    def test_silent_command_returns_prompt_only(self, mock_tmux, clock):
        create_shell_session(mock_tmux, clock)
        detector = make_detector(mock_tmux, clock)

        outcome = detector.run("%0", run_command(mock_tmux, "%0", "cd /tmp"))

        assert outcome.timed_out is False
        assert outcome.lines == ["$ cd /tmp", "$ "]

    def test_key_with_no_effect_settles_with_empty_output(self, mock_tmux, clock):
        create_shell_session(mock_tmux, clock)
        detector = make_detector(mock_tmux, clock)

        outcome = detector.run(
            "%0", lambda: mock_tmux.send_key_tokens("%0", [KeyToken("C-c", literal=False)])
        )

        assert outcome.timed_out is False
        assert outcome.lines == []
        assert outcome.elapsed < 1.0


class TestLongRunningCommands:
    """Commands that change the foreground process."""

    def test_never_returning_times_out_at_deadline(self, mock_tmux, clock):
        shell = create_shell_session(mock_tmux, clock)
        shell.program("sleep 10", process="sleep", duration=10.0)
        detector = make_detector(mock_tmux, clock)

        outcome = detector.run("%0", run_command(mock_tmux, "%0", "sleep 10"))

        assert outcome.timed_out is True
        assert outcome.exit_code == 124
        assert outcome.elapsed == pytest.approx(5.0, abs=1e-6)
        assert outcome.lines == ["$ sleep 10"]

    def test_timeout_keeps_partial_output(self, mock_tmux, clock):
        shell = create_shell_session(mock_tmux, clock)
        shell.program("./server", process="node", duration=60.0, output=["listening on :8080"])
        detector = make_detector(mock_tmux, clock)

        outcome = detector.run("%0", run_command(mock_tmux, "%0", "./server"))

        assert outcome.timed_out is True
        assert outcome.lines == ["$ ./server", "listening on :8080"]

    def test_settles_after_foreground_returns(self, mock_tmux, clock):
        shell = create_shell_session(mock_tmux, clock)
        shell.program("make", process="make", duration=2.0, output=["cc -o app main.c"])
        detector = make_detector(mock_tmux, clock)

        outcome = detector.run("%0", run_command(mock_tmux, "%0", "make"))

        assert outcome.timed_out is False
        assert outcome.saw_change is True
        assert outcome.lines == ["$ make", "cc -o app main.c", "$ "]
        # back at bash from 2.0s, then the 0.5s stability window
        assert 2.5 - 1e-9 <= outcome.elapsed < 2.8

    def test_change_seen_skips_grace_period(self, mock_tmux, clock):
        """A short foreground change starts the stability timer right away."""
        shell = create_shell_session(mock_tmux, clock)
        shell.program("true", process="true", duration=0.15)
        detector = make_detector(mock_tmux, clock, grace=2.0)

        outcome = detector.run("%0", run_command(mock_tmux, "%0", "true"))

        assert outcome.saw_change is True
        assert outcome.timed_out is False
        assert outcome.elapsed < 1.0

    def test_flapping_foreground_resets_stability(self, mock_tmux, clock):
        create_shell_session(mock_tmux, clock)
        reads = []

        def foreground():
            # three polls at vim, three at bash, ... then bash for good;
            # each bash phase is shorter than the stability window
            index = len(reads)
            reads.append(index)
            if index >= 33:
                return "bash"
            return "vim" if (index // 3) % 2 == 0 else "bash"

        def action():
            mock_tmux.set_command("api", foreground)

        detector = make_detector(mock_tmux, clock)
        outcome = detector.run("%0", action)

        assert outcome.timed_out is False
        assert outcome.saw_change is True
        # bash for good from the 34th poll (3.4s), then the stability window
        assert outcome.elapsed >= 3.9 - 1e-6


class TestStateMachine:
    """Ordering and bookkeeping of a settle cycle."""

    def test_state_sequence_when_settled(self, mock_tmux, clock):
        create_shell_session(mock_tmux, clock)
        detector = make_detector(mock_tmux, clock)

        outcome = detector.run("%0", run_command(mock_tmux, "%0", "echo hi"))

        assert outcome.states == [
            SettleState.IDLE, SettleState.MUTATING, SettleState.WATCHING, SettleState.SETTLED,
        ]
        assert detector.state is SettleState.SETTLED

    def test_state_sequence_when_timed_out(self, mock_tmux, clock):
        shell = create_shell_session(mock_tmux, clock)
        shell.program("top", process="top", duration=100.0)
        detector = make_detector(mock_tmux, clock)

        outcome = detector.run("%0", run_command(mock_tmux, "%0", "top"))

        assert outcome.states[-1] is SettleState.TIMED_OUT

    def test_action_runs_exactly_once(self, mock_tmux, clock):
        create_shell_session(mock_tmux, clock)
        detector = make_detector(mock_tmux, clock)
        calls = []

        detector.run("%0", lambda: calls.append(clock.now))

        assert len(calls) == 1

    def test_before_capture_precedes_action(self, mock_tmux, clock):
        create_shell_session(mock_tmux, clock)
        detector = make_detector(mock_tmux, clock)

        def action():
            mock_tmux.calls.append(("action",))

        detector.run("%0", action)

        names = [c[0] for c in mock_tmux.calls]
        assert names == ["capture_scrollback", "action", "capture_scrollback"]

    def test_captures_use_history_window(self, mock_tmux, clock):
        create_shell_session(mock_tmux, clock)
        detector = make_detector(mock_tmux, clock, history_lines=1234)

        detector.run("%0", lambda: None)

        captures = [c for c in mock_tmux.calls if c[0] == "capture_scrollback"]
        assert all(c[2] == "1234" for c in captures)

    def test_sleeps_never_exceed_poll_interval(self, mock_tmux, clock):
        shell = create_shell_session(mock_tmux, clock)
        shell.program("sleep 9", process="sleep", duration=9.0)
        detector = make_detector(mock_tmux, clock, timeout=0.35, poll_interval=0.1)

        outcome = detector.run("%0", run_command(mock_tmux, "%0", "sleep 9"))

        assert outcome.timed_out is True
        assert all(s <= 0.1 + 1e-9 for s in clock.sleeps)
        assert clock.sleeps[-1] == pytest.approx(0.05)
        assert outcome.elapsed == pytest.approx(0.35)

    def test_reused_detector_starts_fresh(self, mock_tmux, clock):
        create_shell_session(mock_tmux, clock)
        detector = make_detector(mock_tmux, clock)

        detector.run("%0", run_command(mock_tmux, "%0", "echo one"))
        outcome = detector.run("%0", run_command(mock_tmux, "%0", "echo two"))

        assert outcome.lines == ["$ echo two", "two", "$ "]
        assert outcome.states[0] is SettleState.IDLE


class TestErrors:
    """Access errors are fatal and propagate."""

    def test_error_during_watch_propagates(self, mock_tmux, clock):
        create_shell_session(mock_tmux, clock)
        detector = make_detector(mock_tmux, clock)

        def action():
            mock_tmux.fail_on["current_command"] = "can't find pane: %0"

        with pytest.raises(PaneAccessError, match="can't find pane"):
            detector.run("%0", action)

    def test_error_in_action_propagates(self, mock_tmux, clock):
        create_shell_session(mock_tmux, clock)
        mock_tmux.fail_on["send"] = "server exited"
        detector = make_detector(mock_tmux, clock)

        with pytest.raises(PaneAccessError, match="server exited"):
            detector.run("%0", run_command(mock_tmux, "%0", "echo hi"))

        assert clock.sleeps == []


class TestSettleOutcome:
    """Tests for SettleOutcome."""

    def test_exit_codes(self):
        assert SettleOutcome(lines=[], timed_out=False).exit_code == 0
        assert SettleOutcome(lines=[], timed_out=True).exit_code == 124
