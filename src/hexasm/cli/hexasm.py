"""
hexasm - Assembler Command-Line Interface
=========================================

This module implements the command-line interface for the assembler.

Usage Examples
--------------
Basic assembly:
    $ hexasm prog.s prog.hex

Verbose mode (progress and per-instruction trace):
    $ hexasm -v prog.s prog.hex

Exit status is 0 on success and 1 on any failure. On failure the
destination file is not written.
"""

import logging
from pathlib import Path

import click

from hexasm import __version__
from hexasm.assembler import Assembler
from hexasm.cli.errors import StrictUsageCommand, handle_cli_exception


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command(cls=StrictUsageCommand)
@click.argument(
    "source",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.argument(
    "destination",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (logs every encoded instruction)",
)
@click.version_option(version=__version__, prog_name="hexasm")
def main(source: Path, destination: Path, verbose: bool) -> None:
    """
    Assemble SOURCE into hexadecimal machine words written to DESTINATION.

    Each instruction in SOURCE becomes one line of DESTINATION holding
    8 uppercase hex digits.

    \b
    Examples:
        hexasm prog.s prog.hex
        hexasm -v prog.s prog.hex
    """
    setup_logging(verbose)

    asm = Assembler(verbose=verbose)

    try:
        if verbose:
            click.echo(f"Assembling {source}...")

        words = asm.assemble_file(source)
        asm.write_hex(destination)

        if verbose:
            click.echo(f"Wrote {len(words)} word(s) to {destination}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
