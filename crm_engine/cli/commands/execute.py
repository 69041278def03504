"""Execute intent command."""

import asyncio
import json
from typing import Any, Dict, Optional, Tuple

import click

from crm_engine.cli.error_handlers import ExecutionFailed, with_error_handling
from crm_engine.cli.utils.files import (
    load_store,
    read_json_object,
    resolve_store_path,
    save_store,
)
from crm_engine.cli.utils.formatters import format_info, format_result
from crm_engine.dispatcher import IntentDispatcher


def parse_entity_option(option: str) -> Tuple[str, Any]:
    """Parse a ``key=value`` entity option.

    Values are read as JSON when possible (numbers, booleans, lists) and
    kept as plain strings otherwise.

    Args:
        option: The raw option value

    Returns:
        Tuple of (key, value)

    Raises:
        click.BadParameter: If the option has no ``=``
    """
    key, sep, raw = option.partition("=")
    if not sep or not key.strip():
        raise click.BadParameter(f"Expected key=value, got '{option}'", param_hint="--entity")
    try:
        value = json.loads(raw)
    except ValueError:
        value = raw
    return key.strip(), value


@click.command(name="execute")
@click.option(
    "--intent-file",
    type=str,
    default=None,
    help="JSON file holding the structured intent",
)
@click.option("--action", "-a", type=str, default=None, help="Action tag, e.g. create_company")
@click.option(
    "--entity",
    "-e",
    "entity_options",
    multiple=True,
    help="Entity as key=value (repeatable), e.g. -e companyName=Acme -e dealValue=50000",
)
@click.option("--text", type=str, default="", help="Original user message (optional)")
@click.option(
    "--store-file",
    type=str,
    default=None,
    help="Record store JSON file (optional, uses CRM_STORE_FILE or crm_store.json)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the raw result as JSON")
@click.option("--debug", is_flag=True, help="Show full stack traces")
def execute_intent(
    intent_file: Optional[str],
    action: Optional[str],
    entity_options: Tuple[str, ...],
    text: str,
    store_file: Optional[str],
    as_json: bool,
    debug: bool,
):
    """Execute one structured intent against the local record store.

    The intent comes either from --intent-file or from --action with
    --entity options. The store is saved after execution, including the
    records written by a partially failed composite operation.

    Exit code is 0 on success and 3 when the engine returns a failure.

    Example:
        crm-engine execute -a create_company -e companyName=TechCorp -e dealValue=50000
        crm-engine execute --intent-file intent.json --json
    """
    with with_error_handling(debug):
        intent = _build_intent(intent_file, action, entity_options, text)

        path = resolve_store_path(store_file)
        store = load_store(path)
        dispatcher = IntentDispatcher(store)

        result = asyncio.run(dispatcher.execute(intent))
        save_store(store, path)

        if as_json:
            click.echo(result.model_dump_json(indent=2))
        else:
            for line in format_result(result):
                click.echo(line)
            click.echo(format_info(f"Store saved to {path}"))

        if not result.success:
            raise ExecutionFailed(result.error)


def _build_intent(
    intent_file: Optional[str],
    action: Optional[str],
    entity_options: Tuple[str, ...],
    text: str,
) -> Dict[str, Any]:
    if intent_file and action:
        raise click.UsageError("Use either --intent-file or --action, not both")
    if intent_file:
        return read_json_object(intent_file)
    if not action:
        raise click.UsageError("Either --intent-file or --action is required")

    entities = dict(parse_entity_option(option) for option in entity_options)
    return {"action": action, "entities": entities, "confidence": 1.0, "original_text": text}
