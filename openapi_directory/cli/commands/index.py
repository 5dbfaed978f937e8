"""Index command."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ...exceptions import DirectoryException
from ...utils.file import find_spec_files, load_specification, spec_id_from_path
from ..common import build_directory, build_metrics

logger = logging.getLogger(__name__)
console = Console()


@click.command()
@click.argument("spec_file", type=click.Path(exists=True))
@click.option(
    "--spec-id",
    default=None,
    help="Identifier of the specification (default: file name without extension)",
)
def index(spec_file: str, spec_id: Optional[str]) -> None:
    """Index an OpenAPI specification file, or every specification in a directory."""
    path = Path(spec_file)
    files = find_spec_files(path) if path.is_dir() else [str(path)]
    if not files:
        console.print(f"[red]Error:[/red] No specification files found in {path}")
        sys.exit(1)
    if spec_id and len(files) > 1:
        console.print("[red]Error:[/red] --spec-id requires a single specification file")
        sys.exit(1)

    try:
        directory = build_directory(use_llm=False, metrics=build_metrics())

        table = Table(title="Indexing Results", show_header=True, header_style="bold magenta")
        table.add_column("Specification", style="cyan")
        table.add_column("Embedded", justify="right", style="green")
        table.add_column("Skipped", justify="right")
        table.add_column("Failed", justify="right", style="red")

        failed = False
        for file_path in files:
            current_id = spec_id or spec_id_from_path(file_path)
            logger.info(f"Indexing {file_path} as {current_id}")
            report = directory.embed(load_specification(file_path), current_id)
            failed = failed or not report.ok
            table.add_row(
                current_id,
                str(report.embedded),
                str(report.skipped),
                str(len(report.failed_ids)),
            )

        console.print(table)
        if failed:
            sys.exit(2)

    except (DirectoryException, OSError, ValueError) as e:
        logger.error(f"Indexing failed: {e}")
        console.print(f"[red]Error:[/red] {str(e)}")
        sys.exit(1)
