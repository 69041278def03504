"""Error handling for CLI commands."""

import json
import sys
import traceback
from typing import Optional

import click
from pydantic import ValidationError as PydanticValidationError

from crm_engine.cli.utils.formatters import format_error, format_warning


# Exceptions click or the interpreter already turn into an exit status
PASS_THROUGH = (SystemExit, click.exceptions.Exit, click.ClickException)


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        """
        Initialize CLI error.

        Args:
            message: Error message to display
            recovery_hint: Optional hint for recovering from the error
        """
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class InputFileError(CLIError):
    """An intent or budget input file is missing or unreadable."""

    pass


class StoreFileError(CLIError):
    """The record store file could not be loaded or saved."""

    pass


class ExecutionFailed(CLIError):
    """The engine returned a failed result."""

    pass


def handle_cli_error(error: BaseException, debug: bool = False) -> int:
    """
    Print a user-friendly message for an error.

    Args:
        error: The exception that occurred
        debug: Whether to show full stack trace

    Returns:
        Exit code (1-4 for known error types, 130 on abort, 255 otherwise)
    """
    if isinstance(error, InputFileError):
        _echo_cli_error("Input Error", error)
        return 1

    elif isinstance(error, StoreFileError):
        _echo_cli_error("Store Error", error)
        return 2

    elif isinstance(error, ExecutionFailed):
        _echo_cli_error("Execution Failed", error)
        return 3

    elif isinstance(error, (PydanticValidationError, json.JSONDecodeError)):
        click.echo(format_error("Data Validation Error"), err=True)
        click.echo(str(error), err=True)
        return 4

    elif isinstance(error, click.Abort):
        click.echo(format_warning("\nOperation cancelled by user"), err=True)
        return 130

    else:
        click.echo(format_error(f"Unexpected Error: {type(error).__name__}"), err=True)
        click.echo(str(error), err=True)

        if debug:
            click.echo("\nFull stack trace:", err=True)
            click.echo(traceback.format_exc(), err=True)
        else:
            click.echo(format_warning("\nRun with --debug flag for full stack trace"), err=True)

        return 255


def _echo_cli_error(label: str, error: CLIError) -> None:
    click.echo(format_error(f"{label}: {error.message}"), err=True)
    if error.recovery_hint:
        click.echo(format_warning(f"Hint: {error.recovery_hint}"), err=True)


class ErrorHandler:
    """Context manager turning exceptions into CLI exit codes."""

    def __init__(self, show_debug: bool):
        self.show_debug = show_debug

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_val is not None and not isinstance(exc_val, PASS_THROUGH):
            exit_code = handle_cli_error(exc_val, self.show_debug)
            sys.exit(exit_code)
        return False


def with_error_handling(debug: bool = False) -> ErrorHandler:
    """
    Wrap a command body with standardized error handling.

    Args:
        debug: Whether to show full stack traces

    Example:
        @click.command()
        @click.option('--debug', is_flag=True)
        def my_command(debug):
            with with_error_handling(debug):
                ...
    """
    return ErrorHandler(debug)
