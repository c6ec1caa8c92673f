"""
Rich logging configuration for the tailfollow CLI.

Everything goes to stderr so that followed lines on stdout stay clean
(important for --json).
"""
from __future__ import annotations
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: int = 0) -> None:
    """
    Levels: WARNING (no -v), INFO (-v), DEBUG (-vv).
    """
    root = logging.getLogger()
    # Reset any prior basicConfig/handlers
    for h in list(root.handlers):
        root.removeHandler(h)

    level = logging.WARNING if verbose == 0 else (logging.INFO if verbose == 1 else logging.DEBUG)
    root.setLevel(level)

    handler = RichHandler(
        console=Console(file=sys.stderr),
        show_time=verbose > 1,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    root.addHandler(handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING if verbose < 2 else logging.DEBUG)
