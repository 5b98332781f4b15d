"""Logging configuration for the codex-wakatime process.

Codex spawns one short-lived process per completed turn and does not surface
its output, so diagnostics go to two places:
- stderr through Rich (warnings and above unless debug is enabled)
- an append-only file under ~/.wakatime, only when debug is enabled
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler

Verbosity = Literal["debug", "info", "warning", "error"]

_LEVEL_MAP = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def setup_logging(
    verbosity: Verbosity = "warning",
    log_to_file: bool = False,
    log_file_path: Path | str | None = None,
) -> logging.Logger:
    """Configure logging for the reporter process.

    Args:
        verbosity: Console verbosity level (debug, info, warning, error)
        log_to_file: Whether to also log to a file (default: False)
        log_file_path: Path for file logging (if log_to_file=True)

    Returns:
        Configured root logger instance
    """
    log_level = _LEVEL_MAP.get(verbosity, logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Clear existing handlers (avoid duplicates on re-initialization)
    root_logger.handlers.clear()

    rich_handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_level=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
    )
    rich_handler.setLevel(log_level)
    rich_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root_logger.addHandler(rich_handler)

    if log_to_file and log_file_path:
        try:
            path = Path(log_file_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)

            file_formatter = logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
            file_handler.setFormatter(file_formatter)

            root_logger.addHandler(file_handler)
        except OSError as e:
            # Fallback: warn but don't crash
            root_logger.warning(f"Failed to setup file logging: {e}")

    return root_logger


def init_reporter_logging(
    verbosity: Verbosity = "warning",
    debug: bool = False,
    log_file_path: Path | str | None = None,
) -> None:
    """Initialize logging for one reporter invocation.

    Debug mode (from ~/.wakatime.cfg) forces debug console output and turns on
    the log file.

    Args:
        verbosity: Console verbosity from the settings file.
        debug: Whether the WakaTime config enables debug.
        log_file_path: Destination of the debug log file.
    """
    setup_logging(
        verbosity="debug" if debug else verbosity,
        log_to_file=debug,
        log_file_path=log_file_path,
    )
