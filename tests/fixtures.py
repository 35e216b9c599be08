"""
Test fixtures and factories for tmm unit tests.

Fakes for time and for a shell running in a pane, so settle behaviour
can be exercised without tmux or real sleeps.
"""

from typing import List, Optional

from tmm.mocks import MockTmux


class FakeClock:
    """Monotonic clock that only advances when sleep() is called."""

    def __init__(self, start: float = 0.0):
        self.start = start
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    @property
    def elapsed(self) -> float:
        return self.now - self.start


class FakeShell:
    """on_send handler that makes a MockTmux pane behave like bash.

    Literal text is echoed onto the prompt line; Enter runs it. ``echo``
    prints its arguments immediately. Any other command listed in
    ``running`` switches the foreground process for ``duration`` seconds
    of fake-clock time, printing ``output`` lines right away.
    """

    def __init__(self, clock: FakeClock, prompt: str = "$ ", shell: str = "bash"):
        self.clock = clock
        self.prompt = prompt
        self.shell = shell
        self.typed = ""
        self.running = {}  # command -> (process name, duration, output)

    def program(self, command: str, process: str, duration: float, output: Optional[List[str]] = None):
        self.running[command] = (process, duration, list(output or []))

    def __call__(self, tmux: MockTmux, pane_id: str, kind: str, value: str) -> None:
        pane = tmux.pane(pane_id)
        if kind == "literal":
            self.typed += value
            pane.lines[-1] = self.prompt + self.typed
            return
        if value != "Enter":
            return

        command, self.typed = self.typed, ""
        if command.startswith("echo "):
            pane.lines.append(command[len("echo "):])
            pane.lines.append(self.prompt)
            return
        if command in self.running:
            process, duration, output = self.running[command]
            pane.lines.extend(output)
            done_at = self.clock.now + duration
            shell = self.shell
            prompt = self.prompt
            clock = self.clock

            def foreground() -> str:
                if clock.now < done_at:
                    return process
                if pane.lines[-1] != prompt:
                    pane.lines.append(prompt)
                return shell

            pane.command = foreground
            return
        pane.lines.append(self.prompt)


def create_shell_session(tmux: MockTmux, clock: FakeClock, name: str = "api",
                         history: Optional[List[str]] = None) -> FakeShell:
    """Add a session showing an idle bash prompt, driven by a FakeShell."""
    lines = list(history or []) + ["$ "]
    tmux.add_session(name, activity=1700000000, lines=lines, command="bash")
    shell = FakeShell(clock)
    tmux.on_send = shell
    return shell
