"""Logging utilities with rich console output.

Every module logs through a named logger so provider traffic, quota
telemetry and strategy decisions can be filtered per component:

    from common.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Looking up UPC/EAN code: 012345678905")
    logger.warning("UPCitemdb returned status 500")
    logger.error("Daily quota exhausted", exc_info=True)
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from common.env import env

# Global console instance for consistent output
console = Console()


def _rich_handler(show_time: bool, show_path: bool) -> RichHandler:
    return RichHandler(
        console=console,
        show_time=show_time,
        show_path=show_path,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        markup=False,  # provider titles routinely contain [brackets]
    )


def get_logger(
    name: str,
    level: str | None = None,
    show_time: bool = False,
    show_path: bool = False,
) -> logging.Logger:
    """Get a configured logger with rich output.

    Args:
        name: Logger name (typically __name__ of the module)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If None, uses LOG_LEVEL from the environment (default INFO).
        show_time: Show timestamp in log output
        show_path: Show file path in log output

    Returns:
        Configured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Lookup complete")
        Lookup complete
    """
    logger = logging.getLogger(name)

    # Avoid adding multiple handlers if logger already configured
    if logger.handlers:
        return logger

    logger.setLevel((level or env.log_level()).upper())

    handler = _rich_handler(show_time, show_path)
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)

    # Propagate so pytest's caplog still sees records
    logger.propagate = True

    return logger


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure the root logger once at an entry point (CLI or HTTP app).

    Args:
        level: Default logging level, overridden by LOG_LEVEL when set
        log_file: Optional file path to also log to a file
    """
    import os

    level = os.getenv("LOG_LEVEL", level).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = _rich_handler(show_time=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)


def error(message: str) -> None:
    """Print an error message with a red X to stderr.

    Example:
        >>> error("Invalid identifier type")
        ✗ Invalid identifier type
    """
    Console(stderr=True).print(f"[red]✗[/red] {escape(message)}")
