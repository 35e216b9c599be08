"""
Logging configuration for tmm.

All loggers live under the ``tmm`` namespace. Console output goes
through Rich on stderr so it never mixes with pane output on stdout.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "tmm"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the tmm namespace (``tmm.<name>``)."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logging(
    level: int = logging.WARNING,
    log_file: Optional[Path] = None,
    console: bool = True,
) -> logging.Logger:
    """Configure the tmm root logger.

    Existing handlers are replaced, so calling this twice is safe.

    Args:
        level: Logging level
        log_file: Optional file to append plain-text records to
        console: Whether to log to stderr via Rich
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.setLevel(level)
    logger.propagate = False

    if console:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )
        handler.setLevel(level)
        logger.addHandler(handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger


def setup_cli_logging(verbose: bool = False) -> logging.Logger:
    """Logging for one CLI invocation.

    WARNING by default, DEBUG with --verbose. ``TMM_LOG_LEVEL`` overrides
    the default and ``TMM_LOG_FILE`` adds a file handler.
    """
    level = logging.WARNING
    env_level = os.environ.get("TMM_LOG_LEVEL")
    if env_level:
        level = logging.getLevelName(env_level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    if verbose:
        level = logging.DEBUG

    log_file = os.environ.get("TMM_LOG_FILE")
    setup_logging(level=level, log_file=Path(log_file) if log_file else None)
    return get_logger("cli")
