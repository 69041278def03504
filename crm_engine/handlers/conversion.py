"""
Deal to project conversion.

Converting a deal creates a project carrying the deal's title, company,
value and tags, then closes the deal as won. The two writes are not
atomic: the project is created first and the deal is only touched once the
project exists. If the deal update then fails the project is kept and the
failure names it. Deal field changes requested with the conversion are
saved by that same closing update.
"""

import datetime as dt
import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from crm_engine.calculators.budget_calculator import compute_budget
from crm_engine.config.settings import EngineConfig, get_config
from crm_engine.models.budget import BudgetInputs
from crm_engine.models.base import utc_now
from crm_engine.models.intent import ExecutionResult
from crm_engine.models.records import Deal, Project
from crm_engine.services.composite import CompositeOperation, FailurePolicy
from crm_engine.services.errors import (
    EngineError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from crm_engine.services.record_store import RecordStore

logger = logging.getLogger(__name__)

BUDGET_OVERRIDE_KEYS = (
    "total_revenue",
    "contingency_percentage",
    "currency",
    "resources",
    "expenses",
)


class DealConverter:
    """
    Converts a deal into a project.

    Example:
        >>> converter = DealConverter(store)
        >>> project, deal = await converter.convert_deal_to_project(deal_id)
        >>> deal.stage
        'closed-won'
    """

    def __init__(self, store: RecordStore, config: Optional[EngineConfig] = None):
        """
        Initialize the converter.

        Args:
            store: Record store
            config: Engine configuration (conversion duration, contingency)
        """
        self.store = store
        self.config = config or get_config()

    async def convert_deal_to_project(
        self,
        deal_id: str,
        overrides: Optional[Mapping[str, Any]] = None,
        deal_changes: Optional[Mapping[str, Any]] = None,
    ) -> Tuple[Project, Deal]:
        """
        Create a project from a deal and mark the deal as won.

        Args:
            deal_id: Deal to convert
            overrides: Project fields replacing the defaults derived from the
                deal; ``budget`` or top-level budget input keys adjust the
                budget inputs
            deal_changes: Deal fields to change; the project is built from
                the changed deal and the changes are saved with the closing
                update, so a failed project create leaves the deal as it was

        Returns:
            Tuple of (created project, updated deal)

        Raises:
            NotFoundError: If the deal does not exist
            ValidationError: If the deal was already converted or the
                changes are invalid
            StoreError: If project creation fails (the deal is untouched)
            SecondaryEffectError: If the deal update fails after the project
                was created; the message names the project id
        """
        deal = await _store_call(self.store.deals.get(deal_id))
        if deal is None:
            raise NotFoundError(
                f"Deal not found: {deal_id}",
                guidance="I couldn't find that deal. Please check the name or id.",
            )
        if deal.converted_to_project:
            raise ValidationError(
                f"Deal already converted to project {deal.project_id}",
                guidance=f"The deal \"{deal.title}\" already has a project.",
            )

        deal_changes = dict(deal_changes or {})
        if deal_changes:
            deal = apply_deal_changes(deal, deal_changes)

        project_fields = self.project_fields(deal, overrides or {})

        async def create_project() -> Project:
            return await _store_call(self.store.projects.create(project_fields))

        async def close_deal(project: Project) -> Deal:
            try:
                updated = await self.store.deals.update(
                    deal.id,
                    {
                        **deal_changes,
                        "stage": "closed-won",
                        "status": "won",
                        "converted_to_project": True,
                        "converted_to_project_at": utc_now(),
                        "actual_close_date": dt.date.today(),
                        "project_id": project.id,
                    },
                )
            except Exception as e:
                raise StoreError(
                    f"project {project.id} was created but deal {deal.id} was not updated: {e}",
                    cause=e,
                ) from e
            if updated is None:
                raise NotFoundError(
                    f"project {project.id} was created but deal {deal.id} no longer exists"
                )
            return updated

        operation = CompositeOperation(
            primary=create_project,
            secondary=close_deal,
            secondary_policy=FailurePolicy.ABORT_ALL,
            description="closing the converted deal",
        )
        outcome = await operation.run()
        logger.info(f"Converted deal {deal.id} into project {outcome.primary.id}")
        return outcome.primary, outcome.secondary

    def project_fields(self, deal: Deal, overrides: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Build project fields from a deal plus overrides.

        Args:
            deal: Source deal
            overrides: Project field overrides

        Returns:
            Project record fields with a computed budget
        """
        overrides = dict(overrides)
        budget_data: Dict[str, Any] = {
            "total_revenue": deal.value,
            "resources": [],
            "expenses": [],
            "contingency_percentage": self.config.default_contingency_percentage,
            "currency": deal.currency,
        }
        budget_data.update(overrides.pop("budget", None) or {})
        for key in BUDGET_OVERRIDE_KEYS:
            if key in overrides:
                budget_data[key] = overrides.pop(key)

        today = dt.date.today()
        fields: Dict[str, Any] = {
            "deal_id": deal.id,
            "company_id": deal.company_id,
            "title": deal.title,
            "description": deal.description,
            "status": "planning",
            "start_date": today,
            "end_date": today + dt.timedelta(days=self.config.conversion_duration_days),
            "tags": list(deal.tags),
            "created_from_deal": True,
        }
        fields.update(overrides)
        fields["budget"] = compute_budget(BudgetInputs.model_validate(budget_data))
        return fields


def apply_deal_changes(deal: Deal, changes: Mapping[str, Any]) -> Deal:
    """
    Return the deal with field changes applied, without saving it.

    Raises:
        ValidationError: If a changed field fails the deal's validation
    """
    try:
        return Deal.model_validate({**deal.model_dump(), **changes})
    except PydanticValidationError as e:
        fields = ", ".join(str(error["loc"][-1]) for error in e.errors())
        raise ValidationError(
            f"Invalid deal values: {fields}",
            guidance="Some of the deal details have the wrong format.",
        ) from e


def conversion_result(project: Project, deal: Deal) -> ExecutionResult:
    """Successful result for a finished conversion."""
    return ExecutionResult.ok(
        data={"project": project, "deal": deal},
        message=f"Converted deal \"{deal.title}\" into project \"{project.title}\"",
    )


def conversion_failure(error: EngineError) -> ExecutionResult:
    """Failed result for a conversion error."""
    return ExecutionResult.fail(
        error.message,
        error.guidance or f"Failed to convert deal to project. {error.message}",
    )


async def _store_call(awaitable):
    try:
        return await awaitable
    except EngineError:
        raise
    except Exception as e:
        raise StoreError(str(e), cause=e) from e
