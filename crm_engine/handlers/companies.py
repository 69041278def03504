"""
Company handlers.

``create_company`` is a composite operation: the company is the primary
step and, when the intent also names a deal title or value, a first deal
for the new company is the best-effort secondary step.
"""

import logging
from decimal import Decimal
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
    CreateCompanyEntities,
    DeleteCompanyEntities,
    GetCompaniesEntities,
    UpdateCompanyEntities,
)
from crm_engine.models.intent import ActionTag, ExecutionResult
from crm_engine.models.records import Company, Deal
from crm_engine.services.composite import CompositeOperation, FailurePolicy
from crm_engine.services.errors import ValidationError
from crm_engine.validators.field_validators import normalize_choice

logger = logging.getLogger(__name__)


def company_fields(entities: CreateCompanyEntities) -> Dict[str, Any]:
    """Map company entities onto Company record fields."""
    return compact(
        {
            "industry": entities.industry,
            "size": entities.company_size,
            "website": entities.website,
            "phone": entities.phone,
            "email": entities.email,
            "address": entities.address,
            "notes": entities.notes,
            "tags": entities.tags,
        }
    )


class CreateCompanyHandler(ActionHandler):
    """Creates a company and, optionally, its first deal."""

    action = ActionTag.CREATE_COMPANY

    async def execute(self, entities: CreateCompanyEntities) -> ExecutionResult:
        async def create_company() -> Company:
            fields = {"name": entities.company_name, **company_fields(entities)}
            return await self.call_store(self.store.companies.create(fields))

        async def create_first_deal(company: Company) -> Deal:
            return await self.call_store(
                self.store.deals.create(self.first_deal_fields(entities, company))
            )

        operation = CompositeOperation(
            primary=create_company,
            secondary=create_first_deal if entities.has_deal else None,
            secondary_policy=FailurePolicy.REPORT_BUT_CONTINUE,
            description="first deal creation",
        )
        outcome = await operation.run()
        company, deal = outcome.primary, outcome.secondary
        logger.info(f"Created company {company.id} (deal: {deal.id if deal else None})")

        if deal is not None:
            currency = entities.deal_currency or self.config.default_currency
            message = (
                f"Created company \"{company.name}\" with a "
                f"{currency} {entities.deal_value or 0} deal"
            )
        else:
            message = f"Created company \"{company.name}\""

        return ExecutionResult.ok(
            data={"company": company, "deal": deal},
            message=message,
            warnings=outcome.warnings,
        )

    def first_deal_fields(
        self, entities: CreateCompanyEntities, company: Company
    ) -> Dict[str, Any]:
        """
        Build the first deal for a new company.

        Args:
            entities: Company creation entities carrying ``deal*`` fields
            company: The company just created

        Returns:
            Deal record fields with defaults applied

        Raises:
            ValidationError: If the deal value or probability is not a number
        """
        unparsed = entities.unparsed_deal_fields
        if unparsed:
            details = ", ".join(f"{key} '{value}'" for key, value in unparsed.items())
            raise ValidationError(f"{details} is not a number")
        return compact(
            {
                "company_id": company.id,
                "title": entities.deal_title or f"Deal for {company.name}",
                "value": entities.deal_value or Decimal("0"),
                "currency": entities.deal_currency or self.config.default_currency,
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

    def failure_prefix(self, entities: CreateCompanyEntities) -> str:
        return f"Failed to create company \"{entities.company_name}\"."


class GetCompaniesHandler(GetHandler):
    action = ActionTag.GET_COMPANIES
    plural = "companies"

    def matches(self, company: Company, entities: GetCompaniesEntities, context) -> bool:
        if not text_matches(entities.search_term, company.name, company.industry):
            return False
        if not text_matches(entities.industry, company.industry):
            return False
        if entities.status and normalize_choice(entities.status) != company.status:
            return False
        return True


class UpdateCompanyHandler(UpdateHandler):
    """
    Updates a company found by id or, without one, by name fragment.

    ``newCompanyName`` renames the company; ``companyName`` only identifies it.
    """

    action = ActionTag.UPDATE_COMPANY

    async def target_id(self, entities: UpdateCompanyEntities) -> str:
        return await self.resolve_target(
            entities.company_id, entities.company_name, self.resolver.resolve_company
        )

    async def changes(
        self, entities: UpdateCompanyEntities, record_id: str
    ) -> Dict[str, Any]:
        changes = company_fields(entities)
        if entities.new_company_name:
            changes["name"] = entities.new_company_name
        status: Optional[str] = normalize_choice(entities.status)
        if status:
            changes["status"] = status
        return changes

    def describe(self, company: Company) -> str:
        return company.name


class DeleteCompanyHandler(DeleteHandler):
    action = ActionTag.DELETE_COMPANY

    async def target_id(self, entities: DeleteCompanyEntities) -> str:
        return await self.resolve_target(
            entities.company_id, entities.company_name, self.resolver.resolve_company
        )
