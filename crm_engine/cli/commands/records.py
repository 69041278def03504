"""Record listing and help commands."""

import asyncio
from typing import List, Optional

import click

from crm_engine.cli.error_handlers import with_error_handling
from crm_engine.cli.utils.files import load_store, resolve_store_path
from crm_engine.cli.utils.formatters import (
    format_info,
    format_money,
    format_percent,
    format_success,
    format_table,
)
from crm_engine.handlers.help import HELP_TEXT
from crm_engine.models.intent import EntityType
from crm_engine.models.records import Company, Contact, Deal, Project, TimeEntry

ENTITY_CHOICES = [entity_type.value for entity_type in EntityType]


def record_row(record) -> List[str]:
    """Summarize a record as a table row: id, name, detail."""
    short_id = record.id[:8]
    if isinstance(record, Company):
        return [short_id, record.name, record.industry or "-"]
    if isinstance(record, Contact):
        return [short_id, record.full_name, record.email or "-"]
    if isinstance(record, Deal):
        value = format_money(record.value, record.currency)
        return [short_id, record.title, f"{record.stage}, {value}"]
    if isinstance(record, Project):
        margin = format_percent(record.budget.margin_percentage)
        return [short_id, record.title, f"{record.status}, margin {margin}"]
    if isinstance(record, TimeEntry):
        hours = f"{record.hours:.2f}h on {record.date}"
        return [short_id, record.description or "-", hours]
    return [short_id, str(record), ""]


@click.command(name="list-records")
@click.argument("entity_type", type=click.Choice(ENTITY_CHOICES))
@click.option(
    "--store-file",
    type=str,
    default=None,
    help="Record store JSON file (optional, uses CRM_STORE_FILE or crm_store.json)",
)
@click.option("--debug", is_flag=True, help="Show full stack traces")
def list_records(entity_type: str, store_file: Optional[str], debug: bool):
    """List the stored records of one type.

    Example:
        crm-engine list-records deal
        crm-engine list-records company --store-file crm.json
    """
    with with_error_handling(debug):
        store = load_store(resolve_store_path(store_file))
        collection = store.collection(entity_type)
        records = asyncio.run(collection.list())

        if not records:
            click.echo(format_info(f"No {EntityType(entity_type).label} records found."))
            return

        click.echo(format_table(["ID", "Name", "Details"], [record_row(r) for r in records]))
        click.echo()
        click.echo(format_success(f"Found {len(records)} record(s)"))


@click.command(name="help-text")
def help_text():
    """Print the assistant's command overview."""
    click.echo(HELP_TEXT)
