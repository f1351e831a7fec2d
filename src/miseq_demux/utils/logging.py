from __future__ import annotations
import logging
from rich.console import Console
from rich.logging import RichHandler

# -v count -> level; anything above the last entry is DEBUG
_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def setup_logging(verbosity: int = 0) -> None:
    """
    Route all logging through one RichHandler on stderr, leaving stdout to
    the status tables and the live progress view.
    """
    level = _LEVELS[min(max(verbosity, 0), len(_LEVELS) - 1)]
    root = logging.getLogger()
    root.setLevel(level)
    # repeated CLI invocations in one process (CliRunner) must not stack handlers
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_time=False, show_path=False))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
