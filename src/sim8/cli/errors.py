"""
CLI Error Handling
==================

Maps exceptions raised while running a command to a message on stderr
and a process exit code.
"""

import json
import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from sim8.errors import AssemblerError, Sim8Error


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Assembly error in the source
    INVALID_ARGS = 2     # Invalid arguments or unreadable files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    json_errors: bool = False,
) -> NoReturn:
    """
    Report `error` and exit.

    Args:
        error: The exception that was raised
        verbose: If True, print the full traceback for internal errors
        json_errors: If True, report assembly errors as a JSON object
            (name, message, range) instead of the caret diagnostic

    Raises:
        SystemExit: Always
    """
    if isinstance(error, AssemblerError):
        if json_errors:
            click.echo(json.dumps(error.to_dict()), err=True)
        else:
            click.echo(error.format(), err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, Sim8Error):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, (click.BadParameter, ValueError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, (FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
