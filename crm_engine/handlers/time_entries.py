"""Time entry handlers."""

import datetime as dt
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from crm_engine.handlers.base import (
    ActionHandler,
    DeleteHandler,
    GetHandler,
    UpdateHandler,
    compact,
)
from crm_engine.handlers.filters import text_matches
from crm_engine.models.entities import (
    CreateTimeEntryEntities,
    DeleteTimeEntryEntities,
    GetTimeEntriesEntities,
    UpdateTimeEntryEntities,
)
from crm_engine.models.intent import ActionTag, ExecutionResult
from crm_engine.models.records import TimeEntry

logger = logging.getLogger(__name__)

DEFAULT_HOURS = Decimal("1")


def hours_to_minutes(hours: Decimal) -> int:
    """
    Convert worked hours to whole minutes.

    Example:
        >>> hours_to_minutes(Decimal("2.5"))
        150
    """
    return int((hours * 60).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def time_entry_fields(entities: CreateTimeEntryEntities) -> Dict[str, Any]:
    """Map time entry entities onto TimeEntry record fields (duration excluded)."""
    return compact(
        {
            "description": entities.time_description,
            "date": entities.time_date,
            "project_id": entities.project_id,
            "resource_name": entities.resource_name,
            "billable": entities.billable,
            "hourly_rate": entities.hourly_rate,
            "currency": entities.currency,
            "tags": entities.tags,
        }
    )


class CreateTimeEntryHandler(ActionHandler):
    """Logs time; one hour of billable work today unless told otherwise."""

    action = ActionTag.CREATE_TIME_ENTRY

    async def execute(self, entities: CreateTimeEntryEntities) -> ExecutionResult:
        company_id = await self.resolve_company_id(entities)
        hours = entities.time_hours or DEFAULT_HOURS

        fields = {
            "resource_name": self.config.default_resource_name,
            "date": dt.date.today(),
            "currency": self.config.default_currency,
            **time_entry_fields(entities),
        }
        fields["duration"] = hours_to_minutes(hours)
        fields["billable"] = entities.billable is not False
        fields["company_id"] = company_id

        entry = await self.call_store(self.store.time_entries.create(fields))
        logger.info(f"Logged {entry.duration} minutes as time entry {entry.id}")

        message = f"Logged {hours} hours of work"
        if entities.time_description:
            message += f": {entities.time_description}"
        return ExecutionResult.ok(data=entry, message=message)

    def failure_prefix(self, entities: CreateTimeEntryEntities) -> str:
        return "Failed to log time entry."


class GetTimeEntriesHandler(GetHandler):
    action = ActionTag.GET_TIME_ENTRIES
    plural = "time entries"

    def matches(self, entry: TimeEntry, entities: GetTimeEntriesEntities, context) -> bool:
        if not text_matches(entities.search_term, entry.description, entry.resource_name):
            return False
        if entities.project_id and entry.project_id != entities.project_id:
            return False
        if entities.billable is not None and entry.billable != entities.billable:
            return False
        return True


class UpdateTimeEntryHandler(UpdateHandler):
    action = ActionTag.UPDATE_TIME_ENTRY

    async def target_id(self, entities: UpdateTimeEntryEntities) -> str:
        return await self.resolve_target(entities.time_entry_id)

    async def changes(
        self, entities: UpdateTimeEntryEntities, record_id: str
    ) -> Dict[str, Any]:
        changes = time_entry_fields(entities)
        hours: Optional[Decimal] = entities.time_hours
        if hours is not None:
            changes["duration"] = hours_to_minutes(hours)
        return changes

    def describe(self, entry: TimeEntry) -> str:
        return entry.description or entry.id


class DeleteTimeEntryHandler(DeleteHandler):
    action = ActionTag.DELETE_TIME_ENTRY

    async def target_id(self, entities: DeleteTimeEntryEntities) -> str:
        return await self.resolve_target(entities.time_entry_id)
