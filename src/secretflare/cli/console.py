import logging

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["configure_logging", "console", "err_console"]

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def configure_logging(verbose: bool = False) -> None:
    """Send the package's log records to stderr through Rich."""
    level = logging.DEBUG if verbose else logging.WARNING

    logger = logging.getLogger("secretflare")
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()

    handler = RichHandler(console=err_console, rich_tracebacks=True, show_path=verbose)
    handler.setLevel(level)
    logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
