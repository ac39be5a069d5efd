"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes for the CLI.

Every failure, whether a usage error, an unreadable file, or a problem in
the assembly source, exits with status 1.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Exit codes for the CLI."""
    SUCCESS = 0
    FAILURE = 1


class StrictUsageCommand(click.Command):
    """Click command whose usage errors exit with ExitCode.FAILURE."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = ExitCode.FAILURE
            raise


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Unified exception handler for the CLI.

    Formats the error message, optionally prints a traceback for
    unexpected errors in verbose mode, and exits with ExitCode.FAILURE.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Assembly")

    Raises:
        SystemExit: Always
    """
    from hexasm.errors import FileUnavailableError, HexAsmError

    if isinstance(error, FileUnavailableError):
        click.echo(f"Error: {error}", err=True)

    elif isinstance(error, HexAsmError):
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)

    elif isinstance(error, OSError):
        click.echo(f"Error: {error}", err=True)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()

    sys.exit(ExitCode.FAILURE)
