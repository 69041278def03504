"""Unit tests for CLI output formatters."""

from decimal import Decimal

import click

from crm_engine.calculators.budget_calculator import compute_budget
from crm_engine.cli.utils.formatters import (
    format_budget,
    format_error,
    format_info,
    format_money,
    format_percent,
    format_result,
    format_success,
    format_table,
    format_warning,
)
from crm_engine.models.budget import BudgetInputs
from crm_engine.models.intent import ExecutionResult


class TestFormatters:
    """Test suite for CLI output formatters."""

    def test_format_success_contains_message(self):
        """Test that success formatter includes the message."""
        result = format_success("Operation completed")
        assert click.unstyle(result) == "✓ Operation completed"

    def test_format_error_contains_message(self):
        """Test that error formatter includes the message."""
        result = format_error("Something went wrong")
        assert click.unstyle(result) == "✗ Something went wrong"

    def test_format_warning_contains_message(self):
        """Test that warning formatter includes the message."""
        result = format_warning("This is a warning")
        assert click.unstyle(result) == "⚠ This is a warning"

    def test_format_info_contains_message(self):
        """Test that info formatter includes the message."""
        result = format_info("Information message")
        assert click.unstyle(result) == "ℹ Information message"


class TestFormatMoney:
    """Test suite for money formatting."""

    def test_thousands_and_decimals(self):
        """Test that amounts get separators and two decimals."""
        assert format_money(Decimal("1234.5"), "USD") == "USD 1,234.50"

    def test_without_currency(self):
        """Test that the currency prefix is optional."""
        assert format_money(Decimal("0")) == "0.00"

    def test_none(self):
        """Test that a missing amount is shown as a dash."""
        assert format_money(None, "USD") == "-"


class TestFormatPercent:
    """Test suite for percentage formatting."""

    def test_rounds_for_display(self):
        """Test that unrounded percentages are shown with two decimals."""
        assert format_percent(Decimal("66.7")) == "66.70%"
        assert format_percent(Decimal("55.66667")) == "55.67%"

    def test_none(self):
        """Test that a missing percentage is shown as a dash."""
        assert format_percent(None) == "-"


class TestFormatTable:
    """Test suite for table formatting."""

    def test_format_table_with_headers_and_rows(self):
        """Test table formatting with headers and data."""
        headers = ["Name", "Age", "City"]
        rows = [
            ["Alice", "30", "New York"],
            ["Bob", "25", "London"],
        ]

        lines = format_table(headers, rows).split("\n")

        assert lines[0] == "+-------+-----+----------+"
        assert lines[1] == "| Name  | Age | City     |"
        assert lines[3] == "| Alice | 30  | New York |"
        assert lines[-1] == lines[0]
        assert len(lines) == 6

    def test_format_table_without_rows(self):
        """Test that a table without rows shows only the header."""
        lines = format_table(["ID"], []).split("\n")
        assert len(lines) == 3

    def test_format_table_without_headers(self):
        """Test that no headers means no table."""
        assert format_table([], [["x"]]) == ""

    def test_format_table_truncates_long_cells(self):
        """Test that cells are cut to the maximum width."""
        table = format_table(["Name"], [["x" * 60]], max_width=10)
        assert "| xxxxxxxxxx |" in table
        assert "x" * 11 not in table


class TestFormatBudget:
    """Test suite for budget formatting."""

    def test_lists_every_figure(self):
        """Test that all derived figures appear with the currency."""
        budget = compute_budget(
            BudgetInputs(
                total_revenue=Decimal("1000"),
                expenses=[{"planned_cost": Decimal("100")}],
                currency="EUR",
            )
        )

        table = format_budget(budget)

        assert "Total revenue" in table
        assert "EUR 1,000.00" in table
        assert "Contingency (10%)" in table
        assert "EUR 110.00" in table
        assert "89.00%" in table


class TestFormatResult:
    """Test suite for execution result formatting."""

    def test_success_with_warnings(self):
        """Test that warnings follow the status line."""
        result = ExecutionResult.ok(message="Created company", warnings=["deal failed"])

        lines = [click.unstyle(line) for line in format_result(result)]

        assert lines == ["✓ Created company", "⚠ deal failed"]

    def test_failure_with_guidance(self):
        """Test that failures show the error then the guidance."""
        result = ExecutionResult.fail("Company name is required", "Please provide a company name.")

        lines = [click.unstyle(line) for line in format_result(result)]

        assert lines == ["✗ Company name is required", "ℹ Please provide a company name."]

    def test_success_without_message(self):
        """Test that a data-only success still gets a status line."""
        lines = format_result(ExecutionResult.ok(data=[1]))
        assert click.unstyle(lines[0]) == "✓ Done"
