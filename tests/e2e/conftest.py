"""
E2E test fixtures for tmm.

Each test gets a private tmux server (``tmux -L``) running a plain bash
session, and drives the real CLI in a subprocess against it.
"""

import os
import subprocess
import sys
import uuid
from pathlib import Path
from typing import Generator

import pytest

from e2e_utils import TEST_TMUX_SOCKET, tmux, wait_for_prompt


PROJECT_ROOT = Path(__file__).parent.parent.parent
SRC_DIR = PROJECT_ROOT / "src"


@pytest.fixture
def shell_session(check_tmux, tmp_path) -> Generator[dict, None, None]:
    """A fresh bash session on the test socket, plus an env for the CLI."""
    name = f"tmm-e2e-{uuid.uuid4().hex[:8]}"
    result = tmux(
        "new-session", "-d", "-s", name, "-x", "120", "-y", "40",
        "env", "PS1=$ ", "bash", "--norc", "--noprofile",
    )
    if result.returncode != 0:
        pytest.skip(f"could not start tmux: {result.stderr.strip()}")
    wait_for_prompt(name)

    env = os.environ.copy()
    env.pop("TMUX", None)
    env.pop("TMUX_PANE", None)
    env["TMM_TMUX_SOCKET"] = TEST_TMUX_SOCKET
    env["TMM_CONFIG"] = str(tmp_path / "config.yaml")
    env["PYTHONPATH"] = str(SRC_DIR) + os.pathsep + env.get("PYTHONPATH", "")

    try:
        yield {"name": name, "env": env}
    finally:
        tmux("kill-session", "-t", f"={name}")


@pytest.fixture
def tmm_cli(shell_session):
    """Run the tmm CLI against the test socket."""

    def run_cli(*args: str, timeout: int = 20) -> subprocess.CompletedProcess:
        return subprocess.run(
            [sys.executable, "-m", "tmm", *args],
            capture_output=True,
            text=True,
            timeout=timeout,
            env=shell_session["env"],
            cwd=PROJECT_ROOT,
        )

    return run_cli
