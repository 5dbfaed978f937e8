"""
Main Entry Point for OpenAPI Directory

Example Usage:
    $ python -m openapi_directory index specs/petstore.yaml --spec-id petstore
    $ python -m openapi_directory search "update my pet" --spec specs/petstore.yaml --scope write:pets
    $ python -m openapi_directory operation specs/petstore.yaml /pets put
"""

import sys
from typing import Optional, Sequence

import click

from .cli.commands import cli


def main(args: Optional[Sequence[str]] = None) -> int:
    """Main entry point.

    Args:
        args: Command line arguments.
            Defaults to sys.argv[1:].

    Returns:
        Exit code.
    """
    try:
        cli.main(args=args, standalone_mode=False)
        return 0
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
