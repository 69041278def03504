"""Deal handlers."""

import logging
from decimal import Decimal
from typing import Any, Dict

from crm_engine.handlers.base import (
    ActionHandler,
    DeleteHandler,
    GetHandler,
    UpdateHandler,
    compact,
)
from crm_engine.handlers.conversion import DealConverter, conversion_result
from crm_engine.handlers.filters import in_range, text_matches
from crm_engine.models.entities import (
    CreateDealEntities,
    DeleteDealEntities,
    GetDealsEntities,
    UpdateDealEntities,
)
from crm_engine.models.intent import ActionTag, ExecutionResult
from crm_engine.models.records import Deal
from crm_engine.validators.field_validators import normalize_choice

logger = logging.getLogger(__name__)


class CreateDealHandler(ActionHandler):
    action = ActionTag.CREATE_DEAL

    async def execute(self, entities: CreateDealEntities) -> ExecutionResult:
        company_id = await self.resolve_company_id(entities)
        value = entities.deal_value or Decimal("0")
        currency = entities.deal_currency or self.config.default_currency
        fields = compact(
            {
                "company_id": company_id,
                "title": entities.deal_title or f"Deal - {value} {currency}",
                "value": value,
                "currency": currency,
                "stage": normalize_choice(entities.deal_stage)
                or self.config.default_deal_stage,
                "probability": (
                    entities.deal_probability
                    if entities.deal_probability is not None
                    else self.config.default_deal_probability
                ),
                "description": entities.deal_description,
                "notes": entities.deal_notes,
                "tags": entities.deal_tags,
            }
        )

        deal = await self.call_store(self.store.deals.create(fields))
        logger.info(f"Created deal {deal.id} (company: {company_id})")
        return ExecutionResult.ok(
            data=deal,
            message=f"Created deal \"{deal.title}\" worth {deal.currency} {deal.value}",
        )


class GetDealsHandler(GetHandler):
    """Lists deals filtered by text, value, probability, stage and company."""

    action = ActionTag.GET_DEALS
    plural = "deals"

    def matches(self, deal: Deal, entities: GetDealsEntities, context) -> bool:
        if not text_matches(entities.search_term, deal.title, deal.description):
            return False
        if not in_range(deal.value, entities.min_value, entities.max_value):
            return False
        if not in_range(deal.probability, entities.min_probability, entities.max_probability):
            return False
        if entities.stage and normalize_choice(entities.stage) not in deal.stage:
            return False
        return True


class UpdateDealHandler(UpdateHandler):
    """
    Updates a deal, or converts it into a project.

    With ``dealId`` present ``dealTitle`` renames the deal; without it
    ``dealTitle`` identifies the deal. ``convertToProject`` runs the
    deal-to-project conversion; field changes are saved with the deal's
    closing update, so nothing is saved when the project cannot be created.
    """

    action = ActionTag.UPDATE_DEAL

    async def target_id(self, entities: UpdateDealEntities) -> str:
        return await self.resolve_target(
            entities.deal_id, entities.deal_title, self.resolver.resolve_deal
        )

    async def execute(self, entities: UpdateDealEntities) -> ExecutionResult:
        if not entities.convert_to_project:
            return await super().execute(entities)

        record_id = await self.target_id(entities)
        changes = await self.changes(entities, record_id)
        overrides = compact({"title": entities.project_title})
        converter = DealConverter(self.store, self.config)
        project, deal = await converter.convert_deal_to_project(
            record_id, overrides, deal_changes=changes
        )
        return conversion_result(project, deal)

    async def changes(self, entities: UpdateDealEntities, record_id: str) -> Dict[str, Any]:
        changes = compact(
            {
                "title": entities.deal_title if entities.deal_id else None,
                "value": entities.deal_value,
                "currency": entities.deal_currency,
                "stage": normalize_choice(entities.deal_stage),
                "probability": entities.deal_probability,
                "description": entities.deal_description,
                "notes": entities.deal_notes,
                "tags": entities.deal_tags,
            }
        )
        if entities.company_id or entities.company_name:
            company_id = await self.resolve_company_id(entities)
            if company_id:
                changes["company_id"] = company_id
        return changes

    def describe(self, deal: Deal) -> str:
        return deal.title

    def failure_prefix(self, entities: UpdateDealEntities) -> str:
        if entities.convert_to_project:
            return "Failed to convert deal to project."
        return super().failure_prefix(entities)


class DeleteDealHandler(DeleteHandler):
    action = ActionTag.DELETE_DEAL

    async def target_id(self, entities: DeleteDealEntities) -> str:
        return await self.resolve_target(
            entities.deal_id, entities.deal_title, self.resolver.resolve_deal
        )
