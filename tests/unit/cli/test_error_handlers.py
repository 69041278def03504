"""Unit tests for CLI error handling."""

import json

import click
import pytest
from pydantic import ValidationError as PydanticValidationError

from crm_engine.cli.error_handlers import (
    ExecutionFailed,
    InputFileError,
    StoreFileError,
    handle_cli_error,
    with_error_handling,
)
from crm_engine.models.budget import BudgetInputs


def pydantic_error() -> PydanticValidationError:
    try:
        BudgetInputs.model_validate({"totalCost": 1})
    except PydanticValidationError as e:
        return e
    raise AssertionError("expected a validation error")


class TestHandleCliError:
    """Test suite for exit code mapping."""

    @pytest.mark.parametrize(
        "error,code",
        [
            (InputFileError("missing"), 1),
            (StoreFileError("corrupt"), 2),
            (ExecutionFailed("failed"), 3),
            (json.JSONDecodeError("Expecting value", "x", 0), 4),
            (click.Abort(), 130),
            (RuntimeError("boom"), 255),
        ],
    )
    def test_exit_codes(self, error, code):
        """Test that each error type maps to its exit code."""
        assert handle_cli_error(error) == code

    def test_pydantic_error_is_data_error(self, capsys):
        """Test that model validation errors exit with 4."""
        assert handle_cli_error(pydantic_error()) == 4
        assert "Data Validation Error" in capsys.readouterr().err

    def test_recovery_hint_printed(self, capsys):
        """Test that a recovery hint follows the message on stderr."""
        handle_cli_error(StoreFileError("Could not load", recovery_hint="Remove the file"))

        err = capsys.readouterr().err
        assert "Store Error: Could not load" in err
        assert "Hint: Remove the file" in err

    def test_debug_prints_traceback(self, capsys):
        """Test that unexpected errors show a trace only in debug mode."""
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            handle_cli_error(e, debug=True)

        err = capsys.readouterr().err
        assert "Full stack trace" in err
        assert "RuntimeError: boom" in err

    def test_debug_hint_without_debug(self, capsys):
        """Test that non-debug runs suggest --debug."""
        handle_cli_error(RuntimeError("boom"))
        assert "--debug" in capsys.readouterr().err


class TestWithErrorHandling:
    """Test suite for the error handling context manager."""

    def test_converts_errors_to_exit(self):
        """Test that handled errors become SystemExit with the mapped code."""
        with pytest.raises(SystemExit) as exc_info:
            with with_error_handling():
                raise InputFileError("missing")

        assert exc_info.value.code == 1

    @pytest.mark.parametrize(
        "error", [click.UsageError("bad usage"), SystemExit(5), click.exceptions.Exit(0)]
    )
    def test_passes_click_exits_through(self, error):
        """Test that click and interpreter exits are left alone."""
        with pytest.raises(type(error)):
            with with_error_handling():
                raise error

    def test_no_error(self):
        """Test that a clean block does nothing."""
        with with_error_handling():
            value = 1
        assert value == 1
