"""CLI utility functions."""

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

__all__ = [
    "format_budget",
    "format_error",
    "format_info",
    "format_money",
    "format_percent",
    "format_result",
    "format_success",
    "format_table",
    "format_warning",
]
