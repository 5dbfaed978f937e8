"""CLI commands package."""

import click

from ...config import config
from ...logging import init_logging, verbosity_to_level
from .index import index
from .operation import operation
from .search import search


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def cli(verbose: int) -> None:
    """OpenAPI Directory CLI."""
    level = verbosity_to_level(verbose) if verbose else config.log_level
    init_logging(level)


cli.add_command(index)
cli.add_command(search)
cli.add_command(operation)

__all__ = ["cli"]
