"""Operation command."""

import json
import logging
import sys
from typing import Optional

import click
from rich.console import Console

from ...directory import extract_operation_components
from ...evaluator import SchemaNegotiator
from ...exceptions import ConfigurationError, DirectoryException
from ...utils.file import load_specification
from ..common import build_llm

logger = logging.getLogger(__name__)
console = Console()


@click.command()
@click.argument("spec_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("path")
@click.argument("method")
@click.option(
    "--objective",
    help="Also print the input schemas filtered down to this objective (needs an LLM)",
)
def operation(spec_file: str, path: str, method: str, objective: Optional[str]) -> None:
    """Print the dereferenced schemas of one operation as JSON."""
    try:
        document = load_specification(spec_file)
        components = extract_operation_components(document, path, method)
        result = components.to_dict()

        if objective:
            llm = build_llm()
            if llm is None:
                raise ConfigurationError("OPENROUTER_API_KEY is required for --objective")
            negotiator = SchemaNegotiator(llm)
            result["filtered_schema"] = negotiator.filter_input_schemas(
                objective,
                f"{method.upper()} {path}",
                components.required,
                {"body": components.body, "query": components.query, "path": components.path},
            )
    except (DirectoryException, OSError, ValueError) as e:
        logger.error(f"Operation lookup failed: {e}")
        console.print(f"[red]Error:[/red] {str(e)}")
        sys.exit(1)

    click.echo(json.dumps(result, indent=2))
