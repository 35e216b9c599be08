"""
User configuration for tmm.

Configuration via ~/.tmm/config.yaml (or the file named by TMM_CONFIG),
with environment variable overrides:

    tmux_socket: work          # tmux -L socket name
    tail_lines: 10             # default for `tmm tail`
    settle:
      timeout_ms: 5000
      stable_ms: 500
      grace_ms: 250
      poll_ms: 100
      history_lines: 50000
    fzf:
      options: ["--height=40%", "--reverse"]

Environment variables:
    TMM_CONFIG          path of the config file
    TMM_TMUX_SOCKET     overrides tmux_socket
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .settle import SettleConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".tmm" / "config.yaml"
DEFAULT_TAIL_LINES = 10

CONFIG_TEMPLATE = """\
# tmm configuration
# Location: ~/.tmm/config.yaml (override with TMM_CONFIG)

# tmux socket name (tmux -L), also settable via TMM_TMUX_SOCKET
# tmux_socket: default

# Lines printed by `tmm tail` when --lines is not given
# tail_lines: 10

# Timing for `tmm run` / `tmm keys`
# settle:
#   timeout_ms: 5000     # give up and print partial output
#   stable_ms: 500       # foreground back at the shell for this long
#   grace_ms: 250        # minimum wait for commands that finish instantly
#   poll_ms: 100
#   history_lines: 50000 # scrollback captured for diffing

# Extra fzf arguments for interactive pickers
# fzf:
#   options: ["--height=40%", "--reverse"]
"""


def get_config_path() -> Path:
    env_path = os.environ.get("TMM_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config() -> Dict[str, Any]:
    """Load the config file. Missing or unreadable files yield ``{}``."""
    path = get_config_path()
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as e:
        logger.warning("Ignoring invalid config file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def _positive(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def get_settle_config(config: Optional[Dict[str, Any]] = None) -> SettleConfig:
    """Build SettleConfig from the ``settle`` section (milliseconds)."""
    if config is None:
        config = load_config()
    section = config.get("settle") or {}
    if not isinstance(section, dict):
        section = {}
    defaults = SettleConfig()
    return SettleConfig(
        timeout=_positive(section.get("timeout_ms"), defaults.timeout * 1000) / 1000,
        stable=_positive(section.get("stable_ms"), defaults.stable * 1000) / 1000,
        grace=_positive(section.get("grace_ms"), defaults.grace * 1000) / 1000,
        poll_interval=_positive(section.get("poll_ms"), defaults.poll_interval * 1000) / 1000,
        history_lines=int(_positive(section.get("history_lines"), defaults.history_lines)),
    )


def get_tmux_socket(config: Optional[Dict[str, Any]] = None) -> Optional[str]:
    env_socket = os.environ.get("TMM_TMUX_SOCKET")
    if env_socket:
        return env_socket
    if config is None:
        config = load_config()
    socket = config.get("tmux_socket")
    return str(socket) if socket else None


def get_tail_lines(config: Optional[Dict[str, Any]] = None) -> int:
    if config is None:
        config = load_config()
    return int(_positive(config.get("tail_lines"), DEFAULT_TAIL_LINES))


def get_fzf_options(config: Optional[Dict[str, Any]] = None) -> List[str]:
    if config is None:
        config = load_config()
    section = config.get("fzf") or {}
    if not isinstance(section, dict):
        return []
    options = section.get("options") or []
    if isinstance(options, str):
        return options.split()
    return [str(o) for o in options]
