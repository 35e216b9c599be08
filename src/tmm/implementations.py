"""
Real implementations of protocol interfaces.

RealTmux talks to the tmux server through libtmux; RealSelector runs fzf
as a subprocess. Nothing is cached: every call reads the server's
current state, since sessions may be created, renamed or killed by
other clients between two tmm invocations.
"""

import logging
import os
import subprocess
from typing import Optional, List, Sequence, Tuple

import libtmux
from libtmux.exc import LibTmuxException

from .exceptions import (
    PaneAccessError,
    SelectorError,
    SelectorNotFoundError,
    SessionExistsError,
    SessionNotFoundError,
)
from .keys import KeyToken
from .sessions import SessionInfo

logger = logging.getLogger(__name__)

# list-sessions prints these on stderr when no server is running
_NO_SERVER_MARKERS = ("no server running", "error connecting to", "No such file or directory")

_SESSION_FORMAT = "#{session_name}\t#{session_activity}\t#{session_attached}"


class RealTmux:
    """Production implementation of PaneAccessor and SessionStore."""

    def __init__(self, socket_name: Optional[str] = None):
        """Initialize with optional socket name (tmux -L)."""
        self._socket_name = socket_name
        self._server: Optional[libtmux.Server] = None

    @property
    def server(self) -> libtmux.Server:
        """Lazy-load the tmux server connection."""
        if self._server is None:
            if self._socket_name:
                self._server = libtmux.Server(socket_name=self._socket_name)
            else:
                self._server = libtmux.Server()
        return self._server

    def _run(self, *args: str) -> List[str]:
        """Run a tmux command, returning stdout lines.

        Raises:
            PaneAccessError: if tmux reports an error
        """
        try:
            proc = self.server.cmd(*args)
        except LibTmuxException as e:
            logger.debug("tmux %s raised %s", args[0], e)
            raise PaneAccessError(f"tmux {args[0]} failed: {e}") from e
        if proc.stderr:
            message = " ".join(proc.stderr).strip()
            logger.debug("tmux %s failed: %s", args[0], message)
            raise PaneAccessError(f"tmux {args[0]} failed: {message}")
        return list(proc.stdout)

    def _get_session(self, name: str) -> libtmux.Session:
        try:
            session = self.server.sessions.get(session_name=name, default=None)
        except LibTmuxException as e:
            raise PaneAccessError(f"Could not list tmux sessions: {e}") from e
        if session is None:
            raise SessionNotFoundError(name)
        return session

    # -- PaneAccessor ------------------------------------------------------

    def resolve_active_pane(self, session: str) -> str:
        if not any(s.name == session for s in self.list_sessions()):
            raise SessionNotFoundError(session)
        out = self._run("display-message", "-p", "-t", f"={session}:", "#{pane_id}")
        pane_id = out[0].strip() if out else ""
        if not pane_id:
            raise PaneAccessError(f"No active pane in session: {session}")
        return pane_id

    def capture_scrollback(self, pane_id: str, lines: int) -> List[str]:
        out = self._run("capture-pane", "-p", "-t", pane_id, "-S", f"-{lines}")
        return [line.rstrip("\r") for line in out]

    def current_command(self, pane_id: str) -> str:
        out = self._run("display-message", "-p", "-t", pane_id, "#{pane_current_command}")
        return out[0].strip() if out else ""

    def send_literal_text(self, pane_id: str, text: str) -> None:
        self._run("send-keys", "-t", pane_id, "-l", "--", text)

    def send_submit(self, pane_id: str) -> None:
        self._run("send-keys", "-t", pane_id, "Enter")

    def send_key_tokens(self, pane_id: str, tokens: Sequence[KeyToken]) -> None:
        # Consecutive named keys go out in one send-keys call
        named: List[str] = []
        for token in tokens:
            if token.literal:
                if named:
                    self._run("send-keys", "-t", pane_id, *named)
                    named = []
                self._run("send-keys", "-t", pane_id, "-l", "--", token.value)
            else:
                named.append(token.value)
        if named:
            self._run("send-keys", "-t", pane_id, *named)

    # -- SessionStore ------------------------------------------------------

    def list_sessions(self) -> List[SessionInfo]:
        try:
            proc = self.server.cmd("list-sessions", "-F", _SESSION_FORMAT)
        except LibTmuxException as e:
            raise PaneAccessError(f"Could not list tmux sessions: {e}") from e
        if proc.stderr:
            message = " ".join(proc.stderr)
            if any(marker in message for marker in _NO_SERVER_MARKERS):
                return []
            raise PaneAccessError(f"tmux list-sessions failed: {message.strip()}")

        sessions = []
        for line in proc.stdout:
            parts = line.split("\t")
            if not parts or not parts[0]:
                continue
            activity = parts[1] if len(parts) > 1 else "0"
            attached = parts[2] if len(parts) > 2 else "0"
            sessions.append(SessionInfo(
                name=parts[0],
                activity=int(activity) if activity.isdigit() else 0,
                attached=attached.isdigit() and int(attached) > 0,
            ))
        return sessions

    def new_session(self, name: str) -> None:
        try:
            if self.server.has_session(name, exact=True):
                raise SessionExistsError(name)
            self.server.new_session(session_name=name, attach=False)
        except LibTmuxException as e:
            raise PaneAccessError(f"Could not create session {name}: {e}") from e

    def rename_session(self, old: str, new: str) -> None:
        session = self._get_session(old)
        try:
            session.rename_session(new)
        except LibTmuxException as e:
            raise PaneAccessError(f"Could not rename session {old}: {e}") from e

    def kill_session(self, name: str) -> None:
        session = self._get_session(name)
        try:
            session.kill()
        except LibTmuxException as e:
            raise PaneAccessError(f"Could not remove session {name}: {e}") from e

    def attach(self, name: str) -> None:
        args = ["tmux"]
        if self._socket_name:
            args += ["-L", self._socket_name]
        args += ["attach-session", "-t", f"={name}"]
        os.execvp("tmux", args)

    def switch_client(self, name: str) -> None:
        self._run("switch-client", "-t", f"={name}")

    def detach_client(self) -> None:
        self._run("detach-client")

    def current_session(self, pane_id: Optional[str] = None) -> str:
        args = ["display-message", "-p"]
        if pane_id:
            args += ["-t", pane_id]
        out = self._run(*args, "#{session_name}")
        return out[0].strip() if out else ""


class RealSelector:
    """fzf-backed implementation of Selector.

    Items are fed as ``value<TAB>label`` and fzf shows only the label, so
    values containing spaces survive the round trip.
    """

    # fzf exits 1 for "no match" and 130 when the user aborts
    _CANCEL_CODES = (1, 130)

    def __init__(self, options: Optional[Sequence[str]] = None, executable: str = "fzf"):
        self.options = list(options or [])
        self.executable = executable

    def select(
        self,
        items: Sequence[Tuple[str, str]],
        prompt: str = "",
        multi: bool = False,
    ) -> List[str]:
        if not items:
            return []

        cmd = [self.executable, "--ansi", "--delimiter=\t", "--with-nth=2.."]
        if multi:
            cmd.append("--multi")
        if prompt:
            cmd.append(f"--prompt={prompt} ")
        cmd.extend(self.options)

        fzf_input = "\n".join(f"{value}\t{label}" for value, label in items)
        try:
            result = subprocess.run(
                cmd,
                input=fzf_input,
                stdout=subprocess.PIPE,
                text=True,
            )
        except FileNotFoundError as e:
            raise SelectorNotFoundError(f"{self.executable} not found") from e
        except OSError as e:
            raise SelectorError(f"Could not run {self.executable}: {e}") from e

        if result.returncode in self._CANCEL_CODES:
            return []
        if result.returncode != 0:
            raise SelectorError(f"{self.executable} exited with status {result.returncode}")

        return [
            line.split("\t", 1)[0]
            for line in result.stdout.splitlines()
            if line.strip()
        ]
