"""Search command."""

import json
import logging
import sys
from typing import Tuple

import click
from rich.console import Console
from rich.table import Table

from ...exceptions import DirectoryException
from ..common import build_directory, build_metrics, format_scopes, load_spec_map

logger = logging.getLogger(__name__)
console = Console()


@click.command()
@click.argument("objective")
@click.option(
    "--spec",
    "spec_files",
    multiple=True,
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Indexed specification file (repeatable)",
)
@click.option(
    "--scope",
    "scopes",
    multiple=True,
    help="Scope available to the caller, bare or as specId|scope (repeatable)",
)
@click.option("--no-llm", is_flag=True, help="Skip LLM summarizing and shortlisting")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
def search(
    objective: str,
    spec_files: Tuple[str, ...],
    scopes: Tuple[str, ...],
    no_llm: bool,
    as_json: bool,
) -> None:
    """Find the operations that fit an objective."""
    try:
        spec_map = load_spec_map(spec_files)
        directory = build_directory(use_llm=not no_llm, metrics=build_metrics())
        candidates = directory.identify(spec_map, list(scopes), objective)
    except (DirectoryException, OSError, ValueError) as e:
        logger.error(f"Search failed: {e}")
        console.print(f"[red]Error:[/red] {str(e)}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([candidate.to_dict() for candidate in candidates], indent=2))
        return

    if not candidates:
        console.print("No results found.")
        return

    table = Table(
        title=f"Search Results for: {objective}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Score", justify="right", style="cyan")
    table.add_column("Spec", style="yellow")
    table.add_column("Method", style="green")
    table.add_column("Path", style="blue")
    table.add_column("Scopes")
    table.add_column("Description")

    for candidate in candidates:
        table.add_row(
            f"{candidate.score:.3f}",
            candidate.spec_id,
            candidate.http_method.upper(),
            candidate.path,
            format_scopes(candidate.scopes),
            candidate.description,
        )

    console.print(table)
