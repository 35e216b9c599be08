"""
In-memory implementations of the protocol interfaces.

MockTmux keeps sessions, pane contents and foreground commands in
dictionaries. Tests script pane behaviour with ``on_send`` (react to
typed input) and ``set_command`` (a fixed name or a callable polled on
every foreground read).
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from .exceptions import PaneAccessError, SessionExistsError, SessionNotFoundError
from .keys import KeyToken
from .sessions import SessionInfo

CommandSource = Union[str, Callable[[], str]]


@dataclass
class MockPane:
    pane_id: str
    lines: List[str] = field(default_factory=list)
    command: CommandSource = "bash"


@dataclass
class MockSession:
    name: str
    pane: MockPane
    activity: int = 0
    attached: bool = False


class MockTmux:
    """Fake tmux server implementing PaneAccessor and SessionStore."""

    def __init__(self):
        self.sessions: Dict[str, MockSession] = {}
        self.sent: List[Tuple[str, str, str]] = []  # (pane_id, kind, value)
        self.calls: List[Tuple[str, ...]] = []
        self.on_send: Optional[Callable[["MockTmux", str, str, str], None]] = None
        self.fail_on: Dict[str, str] = {}  # method name -> error message
        self.current: Optional[str] = None  # session of the "current client"
        self.detached = False
        self._next_pane = 0

    # -- test helpers ------------------------------------------------------

    def add_session(self, name: str, activity: int = 0, lines: Optional[List[str]] = None,
                    command: CommandSource = "bash", attached: bool = False) -> MockSession:
        pane = MockPane(pane_id=f"%{self._next_pane}", lines=list(lines or []), command=command)
        self._next_pane += 1
        session = MockSession(name=name, pane=pane, activity=activity, attached=attached)
        self.sessions[name] = session
        return session

    def pane(self, pane_id: str) -> MockPane:
        for session in self.sessions.values():
            if session.pane.pane_id == pane_id:
                return session.pane
        raise PaneAccessError(f"can't find pane: {pane_id}")

    def set_command(self, session: str, command: CommandSource) -> None:
        self.sessions[session].pane.command = command

    def append_lines(self, pane_id: str, *lines: str) -> None:
        self.pane(pane_id).lines.extend(lines)

    def _check(self, method: str) -> None:
        if method in self.fail_on:
            raise PaneAccessError(self.fail_on[method])

    def _record_send(self, pane_id: str, kind: str, value: str) -> None:
        self._check("send")
        self.pane(pane_id)
        self.sent.append((pane_id, kind, value))
        if self.on_send is not None:
            self.on_send(self, pane_id, kind, value)

    # -- PaneAccessor ------------------------------------------------------

    def resolve_active_pane(self, session: str) -> str:
        self.calls.append(("resolve_active_pane", session))
        self._check("resolve_active_pane")
        if session not in self.sessions:
            raise SessionNotFoundError(session)
        return self.sessions[session].pane.pane_id

    def capture_scrollback(self, pane_id: str, lines: int) -> List[str]:
        self.calls.append(("capture_scrollback", pane_id, str(lines)))
        self._check("capture_scrollback")
        content = self.pane(pane_id).lines
        return list(content[-lines:]) if lines > 0 else []

    def current_command(self, pane_id: str) -> str:
        self._check("current_command")
        command = self.pane(pane_id).command
        return command() if callable(command) else command

    def send_literal_text(self, pane_id: str, text: str) -> None:
        self._record_send(pane_id, "literal", text)

    def send_submit(self, pane_id: str) -> None:
        self._record_send(pane_id, "key", "Enter")

    def send_key_tokens(self, pane_id: str, tokens: Sequence[KeyToken]) -> None:
        for token in tokens:
            self._record_send(pane_id, "literal" if token.literal else "key", token.value)

    # -- SessionStore ------------------------------------------------------

    def list_sessions(self) -> List[SessionInfo]:
        self._check("list_sessions")
        return [
            SessionInfo(name=s.name, activity=s.activity, attached=s.attached)
            for s in self.sessions.values()
        ]

    def new_session(self, name: str) -> None:
        self.calls.append(("new_session", name))
        if name in self.sessions:
            raise SessionExistsError(name)
        self.add_session(name)

    def rename_session(self, old: str, new: str) -> None:
        self.calls.append(("rename_session", old, new))
        if old not in self.sessions:
            raise SessionNotFoundError(old)
        if new in self.sessions:
            raise PaneAccessError(f"duplicate session: {new}")
        session = self.sessions.pop(old)
        session.name = new
        self.sessions[new] = session
        if self.current == old:
            self.current = new

    def kill_session(self, name: str) -> None:
        self.calls.append(("kill_session", name))
        if name not in self.sessions:
            raise SessionNotFoundError(name)
        del self.sessions[name]

    def attach(self, name: str) -> None:
        self.calls.append(("attach", name))

    def switch_client(self, name: str) -> None:
        self.calls.append(("switch_client", name))
        self.current = name

    def detach_client(self) -> None:
        self.calls.append(("detach_client",))
        self.detached = True

    def current_session(self, pane_id: Optional[str] = None) -> str:
        if pane_id is not None:
            for session in self.sessions.values():
                if session.pane.pane_id == pane_id:
                    return session.name
        if self.current is None:
            raise PaneAccessError("no current client")
        return self.current


class MockSelector:
    """Selector returning canned answers, one per call."""

    def __init__(self, responses: Optional[List[List[str]]] = None):
        self.responses = list(responses or [])
        self.calls: List[Tuple[List[Tuple[str, str]], str, bool]] = []

    def select(
        self,
        items: Sequence[Tuple[str, str]],
        prompt: str = "",
        multi: bool = False,
    ) -> List[str]:
        self.calls.append((list(items), prompt, multi))
        if not self.responses:
            return []
        return self.responses.pop(0)
