"""
Logging Configuration for OpenAPI Directory

Library modules only create named loggers (`logging.getLogger(__name__)`); handlers are
installed by the application entry point through `init_logging`.

Example Usage:
    from openapi_directory.logging import init_logging

    init_logging("INFO")
"""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

NOISY_LOGGERS = (
    "urllib3",
    "httpx",
    "httpcore",
    "faiss",
    "sentence_transformers",
    "transformers",
    "pinecone",
)


def verbosity_to_level(verbosity: int) -> int:
    """Map a CLI verbosity count to a logging level."""
    return {
        0: logging.WARNING,
        1: logging.INFO,
    }.get(verbosity, logging.DEBUG)


def init_logging(level: Optional[Union[str, int]] = None, show_locals: bool = False) -> None:
    """Initialize logging configuration.

    Args:
        level: Optional logging level (default: INFO)
        show_locals: Whether rich tracebacks include local variables
    """
    if level is None:
        level = "INFO"

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    console_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_show_locals=show_locals,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        f"Logging configured (level: {logging.getLevelName(root_logger.level)})"
    )
