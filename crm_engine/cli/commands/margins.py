"""Project margins command."""

import asyncio
from typing import List, Optional

import click

from crm_engine.calculators.budget_calculator import (
    calculate_project_margins,
    calculate_project_time_stats,
)
from crm_engine.cli.error_handlers import InputFileError, with_error_handling
from crm_engine.cli.utils.files import load_store, resolve_store_path
from crm_engine.cli.utils.formatters import (
    format_money,
    format_percent,
    format_success,
    format_table,
    format_warning,
)
from crm_engine.models.records import Project


def find_project(projects: List[Project], reference: str) -> Project:
    """Find a project by full id or by the short id prefix ``list-records`` shows.

    Raises:
        InputFileError: If no project, or more than one, matches
    """
    matches = [p for p in projects if p.id == reference]
    if not matches:
        matches = [p for p in projects if p.id.startswith(reference)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise InputFileError(
            f"No project matches '{reference}'",
            recovery_hint="Run 'crm-engine list-records project' to see project ids",
        )
    raise InputFileError(
        f"{len(matches)} projects match '{reference}'",
        recovery_hint="Use more characters of the project id",
    )


@click.command(name="margins")
@click.argument("project_ref", type=str)
@click.option(
    "--store-file",
    type=str,
    default=None,
    help="Record store JSON file (optional, uses CRM_STORE_FILE or crm_store.json)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the margins as JSON")
@click.option("--debug", is_flag=True, help="Show full stack traces")
def margins(project_ref: str, store_file: Optional[str], as_json: bool, debug: bool):
    """Compare a project's budgeted margin with the margin from logged time.

    PROJECT_REF is a project id or its short id from list-records.

    Example:
        crm-engine margins 3f2a9c1d
        crm-engine margins 3f2a9c1d --json
    """
    with with_error_handling(debug):
        store = load_store(resolve_store_path(store_file))
        project = find_project(asyncio.run(store.projects.list()), project_ref)
        time_entries = asyncio.run(store.time_entries.list())

        result = calculate_project_margins(project, time_entries)
        if as_json:
            click.echo(result.model_dump_json(indent=2, by_alias=True))
            return

        stats = calculate_project_time_stats(project, time_entries)
        currency = project.budget.currency
        rows = [
            ["Tracked hours", f"{stats.total_tracked_hours:.2f}"],
            ["Billable hours", f"{stats.total_billable_hours:.2f}"],
            ["Budgeted hours", f"{stats.budgeted_hours:.2f}"],
            ["Hours utilization", format_percent(stats.hours_utilization)],
            ["Average rate", format_money(stats.average_hourly_rate, currency)],
            ["Budgeted margin", format_money(result.budgeted_margin, currency)],
            ["Actual cost", format_money(result.actual_cost, currency)],
            ["Actual margin", format_money(result.actual_margin, currency)],
            ["Variance", format_money(result.variance, currency)],
        ]
        click.echo(format_table(["Item", "Value"], rows))
        click.echo()

        variance = format_money(result.variance, currency)
        if result.variance < 0:
            click.echo(format_warning(f"{project.title}: {variance} below budgeted margin"))
        else:
            click.echo(format_success(f"{project.title}: {variance} against budgeted margin"))
