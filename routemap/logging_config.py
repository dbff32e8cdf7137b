"""Root logging for the routemap CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure(level: str = "INFO") -> None:
    """Send log records to stderr through rich; CLI summaries stay on stdout."""
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_time=False, show_path=False, markup=False)],
    )
