import logging
import os
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "FAIL": logging.ERROR,
}


def is_ci_environment():
    return (
        os.getenv('CI') is not None or
        os.getenv('GITHUB_ACTIONS') is not None or
        not sys.stdout.isatty()
    )


def get_console() -> Console:
    """Detect environment and create console."""
    if is_ci_environment():
        # CI/automated environment - no colors, no interactive elements
        return Console(force_terminal=False, no_color=True)
    return Console()


def parse_log_level(name: str) -> int:
    try:
        return LOG_LEVELS[str(name).upper()]
    except KeyError:
        valid = ", ".join(LOG_LEVELS)
        raise ValueError(f"Invalid log level '{name}'. Valid options are: {valid}.")


def setup_logging(level: str = "INFO", verbose: bool = False, console: Optional[Console] = None) -> logging.Logger:
    """Configure the csascan logger once at process start."""
    logger = logging.getLogger("csascan")
    logger.setLevel(logging.DEBUG if verbose else parse_log_level(level))
    logger.handlers.clear()

    handler = RichHandler(
        console=console or get_console(),
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    return logger
