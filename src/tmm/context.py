"""
Process environment as an explicit value.

Whether we run inside tmux decides between attach and switch-client,
and gates the commands that act on "the current session". Commands get
this from an Environment passed in rather than reading os.environ.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class Environment:
    tmux: Optional[str] = None
    tmux_pane: Optional[str] = None

    @property
    def inside_tmux(self) -> bool:
        return bool(self.tmux)

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "Environment":
        env = os.environ if environ is None else environ
        return cls(
            tmux=env.get("TMUX") or None,
            tmux_pane=env.get("TMUX_PANE") or None,
        )
