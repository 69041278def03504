"""Compute budget command."""

from typing import Optional

import click

from crm_engine.calculators.budget_calculator import calculate_resource_cost, compute_budget
from crm_engine.cli.error_handlers import with_error_handling
from crm_engine.cli.utils.files import read_json_object
from crm_engine.cli.utils.formatters import (
    format_budget,
    format_money,
    format_percent,
    format_success,
    format_table,
)
from crm_engine.models.budget import BudgetInputs


@click.command(name="budget")
@click.argument("inputs_file", type=str)
@click.option(
    "--contingency",
    type=float,
    default=None,
    help="Override the contingency percentage (0-100)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the computed budget as JSON")
@click.option("--debug", is_flag=True, help="Show full stack traces")
def budget(inputs_file: str, contingency: Optional[float], as_json: bool, debug: bool):
    """Compute a project budget from a JSON file of budget inputs.

    The file holds totalRevenue, resources, expenses, contingencyPercentage
    and currency. Derived figures in the file are rejected.

    Example:
        crm-engine budget budget.json
        crm-engine budget budget.json --contingency 15 --json
    """
    with with_error_handling(debug):
        data = read_json_object(inputs_file)
        if contingency is not None:
            data["contingencyPercentage"] = contingency
        result = compute_budget(BudgetInputs.model_validate(data))

        if as_json:
            click.echo(result.model_dump_json(indent=2, by_alias=True))
            return

        if result.resources:
            rows = [
                [
                    resource.name or resource.id[:8],
                    resource.rate_type,
                    format_money(calculate_resource_cost(resource), resource.currency),
                ]
                for resource in result.resources
            ]
            click.echo(format_table(["Resource", "Rate", "Cost"], rows))
            click.echo()
        click.echo(format_budget(result))
        click.echo()
        click.echo(
            format_success(
                f"Margin {format_percent(result.margin_percentage)} on "
                f"{format_money(result.total_revenue, result.currency)}"
            )
        )
