"""Rich console output and logging setup for cookiebridge."""

import logging

from rich.console import Console
from rich.logging import RichHandler

# Console instance writing to stderr (stdout reserved for data)
console = Console(stderr=True)


def info(msg: str) -> None:
    """Print an informational message."""
    console.print(f"[blue]ℹ[/blue] {msg}")


def success(msg: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {msg}")


def warning(msg: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]⚠[/yellow] {msg}")


def error(msg: str) -> None:
    """Print an error message."""
    console.print(f"[red]✗[/red] {msg}")


def setup_logging(verbose: bool = False) -> None:
    """Route the package loggers through the shared console.

    WARNING and above by default, DEBUG with verbose.
    """
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("cookiebridge")
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
