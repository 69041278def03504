"""Output formatting utilities for CLI."""

from decimal import Decimal
from typing import Any, List, Optional

import click

from crm_engine.models.budget import ProjectBudget
from crm_engine.models.intent import ExecutionResult


def format_success(message: str) -> str:
    """Format a success message in green."""
    return click.style(f"✓ {message}", fg="green", bold=True)


def format_error(message: str) -> str:
    """Format an error message in red."""
    return click.style(f"✗ {message}", fg="red", bold=True)


def format_warning(message: str) -> str:
    """Format a warning message in yellow."""
    return click.style(f"⚠ {message}", fg="yellow", bold=True)


def format_info(message: str) -> str:
    """Format an info message in blue."""
    return click.style(f"ℹ {message}", fg="blue")


def format_money(amount: Optional[Decimal], currency: str = "") -> str:
    """Format an amount with thousands separators and two decimals.

    Example:
        >>> format_money(Decimal("1234.5"), "USD")
        'USD 1,234.50'
    """
    if amount is None:
        return "-"
    text = f"{amount:,.2f}"
    return f"{currency} {text}" if currency else text


def format_percent(value: Optional[Decimal]) -> str:
    """Format a percentage with two decimals.

    Example:
        >>> format_percent(Decimal("66.7"))
        '66.70%'
    """
    if value is None:
        return "-"
    return f"{value:.2f}%"


def format_table(headers: List[str], rows: List[List[Any]], max_width: int = 40) -> str:
    """Format rows as a plain-text table.

    Args:
        headers: Column headers
        rows: Data rows (each row is a list of cell values)
        max_width: Maximum width of a column; longer cells are truncated

    Returns:
        Formatted table as a string
    """
    if not headers:
        return ""

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(widths)]):
            widths[i] = max(widths[i], len(str(cell)))
    widths = [min(w, max_width) for w in widths]

    separator = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def render(cells: List[Any]) -> str:
        return (
            "|"
            + "|".join(
                f" {str(cell)[: widths[i]]:<{widths[i]}} "
                for i, cell in enumerate(cells[: len(widths)])
            )
            + "|"
        )

    lines = [separator, render(headers), separator]
    if rows:
        lines.extend(render(row) for row in rows)
        lines.append(separator)
    return "\n".join(lines)


def format_budget(budget: ProjectBudget) -> str:
    """Format the derived figures of a budget as a two-column table."""
    currency = budget.currency
    rows = [
        ["Total revenue", format_money(budget.total_revenue, currency)],
        ["Resource cost", format_money(budget.total_resource_cost, currency)],
        ["Expense cost", format_money(budget.total_expense_cost, currency)],
        [
            f"Contingency ({budget.contingency_percentage}%)",
            format_money(budget.contingency_cost, currency),
        ],
        ["Total cost", format_money(budget.total_cost, currency)],
        ["Gross margin", format_money(budget.gross_margin, currency)],
        ["Margin", format_percent(budget.margin_percentage)],
    ]
    return format_table(["Item", "Amount"], rows)


def format_result(result: ExecutionResult) -> List[str]:
    """Render an execution result as styled output lines.

    Args:
        result: Result returned by the dispatcher

    Returns:
        Lines to echo, status line first
    """
    lines: List[str] = []
    if result.success:
        lines.append(format_success(result.message or "Done"))
    else:
        lines.append(format_error(result.error or "Failed"))
        if result.message:
            lines.append(format_info(result.message))
    for warning in result.warnings:
        lines.append(format_warning(warning))
    return lines
