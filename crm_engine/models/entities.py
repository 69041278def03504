"""Per-action entity schemas.

The upstream collaborator sends an open, loosely typed entity map. Each
action tag has its own schema here; ``ENTITY_SCHEMAS`` keys them by tag so
the dispatcher can parse the map into a typed payload before any handler
runs. Keys use the upstream camelCase names (``companyName``,
``dealValue`` ...); unknown keys are ignored.
"""
import datetime as dt
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from crm_engine.models.base import to_decimal
from crm_engine.models.budget import ProjectExpense, ProjectResource
from crm_engine.models.intent import ActionTag


class EntityPayload(BaseModel):
    """Base class for entity payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Treat empty strings from upstream as missing values."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def provided(self) -> Dict[str, Any]:
        """Fields that were actually supplied (not left at default)."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


class CompanyReference(EntityPayload):
    """Informal or explicit reference to a company."""

    company_name: Optional[str] = None
    company_id: Optional[str] = None


def to_whole_number(v: Any) -> Optional[int]:
    """Convert a numeric value without a fractional part to int.

    Raises:
        ValueError: If the value is not a whole number
    """
    number = to_decimal(v)
    if number is None:
        return None
    if not number.is_finite() or number != number.to_integral_value():
        raise ValueError(f"{v} is not a whole number")
    return int(number)


class CreateCompanyEntities(CompanyReference):
    """Entities for ``create_company``; deal fields trigger a first deal.

    The first deal is best-effort, so a deal value or probability that does
    not parse is kept as the raw text instead of rejecting the intent. Only
    the first deal step fails on it.
    """

    industry: Optional[str] = None
    company_size: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[Union[str, Dict[str, Any]]] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    deal_title: Optional[str] = None
    deal_value: Optional[Union[Decimal, str]] = None
    deal_currency: Optional[str] = None
    deal_stage: Optional[str] = None
    deal_probability: Optional[Union[int, str]] = None
    deal_description: Optional[str] = None
    deal_notes: Optional[str] = None
    deal_tags: Optional[List[str]] = None

    @field_validator("deal_value", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        try:
            return to_decimal(v)
        except ValueError:
            return str(v)

    @field_validator("deal_probability", mode="before")
    @classmethod
    def convert_to_whole_number(cls, v):
        try:
            return to_whole_number(v)
        except ValueError:
            return str(v)

    @field_validator("deal_title", mode="before")
    @classmethod
    def title_to_text(cls, v):
        return v if v is None or isinstance(v, str) else str(v)

    @field_validator("deal_tags", mode="before")
    @classmethod
    def single_tag_to_list(cls, v):
        return [v] if isinstance(v, str) else v

    @property
    def has_deal(self) -> bool:
        """Whether the intent also describes a deal for the new company."""
        return bool(self.deal_title) or bool(self.deal_value)

    @property
    def unparsed_deal_fields(self) -> Dict[str, str]:
        """Deal fields kept as text because they are not numbers, by entity key."""
        return {
            key: value
            for key, value in (
                ("dealValue", self.deal_value),
                ("dealProbability", self.deal_probability),
            )
            if isinstance(value, str)
        }


class CreateContactEntities(CompanyReference):
    contact_first_name: Optional[str] = None
    contact_last_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_position: Optional[str] = None
    contact_department: Optional[str] = None
    is_primary: Optional[bool] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None


class CreateDealEntities(CompanyReference):
    deal_title: Optional[str] = None
    deal_value: Optional[Decimal] = None
    deal_currency: Optional[str] = None
    deal_stage: Optional[str] = None
    deal_probability: Optional[int] = None
    deal_description: Optional[str] = None
    deal_notes: Optional[str] = None
    deal_tags: Optional[List[str]] = None

    @field_validator("deal_value", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return to_decimal(v)


class CreateProjectEntities(CompanyReference):
    """Entities for ``create_project``.

    ``project_budget`` is the expected revenue; resources and expenses are
    optional line items costed by the budget calculator.
    """

    project_title: Optional[str] = None
    project_description: Optional[str] = None
    project_status: Optional[str] = None
    deal_id: Optional[str] = None
    project_budget: Optional[Decimal] = None
    deal_value: Optional[Decimal] = None
    contingency_percentage: Optional[Decimal] = None
    currency: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    resources: Optional[List[ProjectResource]] = None
    expenses: Optional[List[ProjectExpense]] = None
    tags: Optional[List[str]] = None

    @field_validator(
        "project_budget", "deal_value", "contingency_percentage", mode="before"
    )
    @classmethod
    def convert_to_decimal(cls, v):
        return to_decimal(v)


class CreateTimeEntryEntities(CompanyReference):
    time_hours: Optional[Decimal] = None
    time_description: Optional[str] = None
    time_date: Optional[dt.date] = None
    project_id: Optional[str] = None
    resource_name: Optional[str] = None
    billable: Optional[bool] = None
    hourly_rate: Optional[Decimal] = None
    currency: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("time_hours", "hourly_rate", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return to_decimal(v)


class GetCompaniesEntities(EntityPayload):
    search_term: Optional[str] = None
    industry: Optional[str] = None
    status: Optional[str] = None


class GetContactsEntities(CompanyReference):
    search_term: Optional[str] = None


class GetDealsEntities(CompanyReference):
    search_term: Optional[str] = None
    stage: Optional[str] = None
    min_value: Optional[Decimal] = None
    max_value: Optional[Decimal] = None
    min_probability: Optional[Decimal] = None
    max_probability: Optional[Decimal] = None

    @field_validator(
        "min_value", "max_value", "min_probability", "max_probability", mode="before"
    )
    @classmethod
    def convert_to_decimal(cls, v):
        return to_decimal(v)


class GetProjectsEntities(CompanyReference):
    search_term: Optional[str] = None
    status: Optional[str] = None
    min_budget: Optional[Decimal] = None
    max_budget: Optional[Decimal] = None
    min_margin: Optional[Decimal] = None
    max_margin: Optional[Decimal] = None

    @field_validator(
        "min_budget", "max_budget", "min_margin", "max_margin", mode="before"
    )
    @classmethod
    def convert_to_decimal(cls, v):
        return to_decimal(v)


class GetTimeEntriesEntities(EntityPayload):
    search_term: Optional[str] = None
    project_id: Optional[str] = None
    billable: Optional[bool] = None


class UpdateCompanyEntities(CreateCompanyEntities):
    """Entities for ``update_company``.

    The target is ``company_id``, or ``company_name`` when no id is given.
    ``new_company_name`` renames the company.
    """

    new_company_name: Optional[str] = None
    status: Optional[str] = None


class UpdateContactEntities(CreateContactEntities):
    contact_id: Optional[str] = None
    status: Optional[str] = None


class UpdateDealEntities(CreateDealEntities):
    """Entities for ``update_deal``.

    With ``deal_id`` present ``deal_title`` is the new title; without it
    ``deal_title`` identifies the deal to update.
    """

    deal_id: Optional[str] = None
    convert_to_project: Optional[bool] = None
    project_title: Optional[str] = None


class UpdateProjectEntities(CreateProjectEntities):
    """Entities for ``update_project``.

    ``resources`` and ``expenses`` replace the whole line item lists. The
    ``add*``, ``update*`` and ``remove*Ids`` keys change single line items;
    each ``update*`` entry is the item ``id`` plus the fields to change, e.g.
    ``{"id": "r-1", "hoursAllocated": 20}``.
    """

    project_id: Optional[str] = None
    progress_percentage: Optional[int] = None
    add_resources: Optional[List[ProjectResource]] = None
    update_resources: Optional[List[Dict[str, Any]]] = None
    remove_resource_ids: Optional[List[str]] = None
    add_expenses: Optional[List[ProjectExpense]] = None
    update_expenses: Optional[List[Dict[str, Any]]] = None
    remove_expense_ids: Optional[List[str]] = None

    @field_validator("update_resources", "update_expenses", mode="before")
    @classmethod
    def single_change_to_list(cls, v):
        if isinstance(v, dict):
            return [v]
        return v

    @field_validator("remove_resource_ids", "remove_expense_ids", mode="before")
    @classmethod
    def single_id_to_list(cls, v):
        if isinstance(v, str) and v.strip():
            return [v]
        return v

    def has_line_item_changes(self) -> bool:
        return any(
            (
                self.add_resources,
                self.update_resources,
                self.remove_resource_ids,
                self.add_expenses,
                self.update_expenses,
                self.remove_expense_ids,
            )
        )


class UpdateTimeEntryEntities(CreateTimeEntryEntities):
    time_entry_id: Optional[str] = None


class DeleteCompanyEntities(CompanyReference):
    pass


class DeleteContactEntities(EntityPayload):
    contact_id: Optional[str] = None


class DeleteDealEntities(EntityPayload):
    deal_id: Optional[str] = None
    deal_title: Optional[str] = None


class DeleteProjectEntities(EntityPayload):
    project_id: Optional[str] = None


class DeleteTimeEntryEntities(EntityPayload):
    time_entry_id: Optional[str] = None


class NoEntities(EntityPayload):
    """Payload for actions that take no entities (help, unknown)."""


ENTITY_SCHEMAS: Dict[ActionTag, Type[EntityPayload]] = {
    ActionTag.CREATE_COMPANY: CreateCompanyEntities,
    ActionTag.CREATE_CONTACT: CreateContactEntities,
    ActionTag.CREATE_DEAL: CreateDealEntities,
    ActionTag.CREATE_PROJECT: CreateProjectEntities,
    ActionTag.CREATE_TIME_ENTRY: CreateTimeEntryEntities,
    ActionTag.GET_COMPANIES: GetCompaniesEntities,
    ActionTag.GET_CONTACTS: GetContactsEntities,
    ActionTag.GET_DEALS: GetDealsEntities,
    ActionTag.GET_PROJECTS: GetProjectsEntities,
    ActionTag.GET_TIME_ENTRIES: GetTimeEntriesEntities,
    ActionTag.UPDATE_COMPANY: UpdateCompanyEntities,
    ActionTag.UPDATE_CONTACT: UpdateContactEntities,
    ActionTag.UPDATE_DEAL: UpdateDealEntities,
    ActionTag.UPDATE_PROJECT: UpdateProjectEntities,
    ActionTag.UPDATE_TIME_ENTRY: UpdateTimeEntryEntities,
    ActionTag.DELETE_COMPANY: DeleteCompanyEntities,
    ActionTag.DELETE_CONTACT: DeleteContactEntities,
    ActionTag.DELETE_DEAL: DeleteDealEntities,
    ActionTag.DELETE_PROJECT: DeleteProjectEntities,
    ActionTag.DELETE_TIME_ENTRY: DeleteTimeEntryEntities,
    ActionTag.HELP: NoEntities,
    ActionTag.UNKNOWN: NoEntities,
}


def parse_entities(action: ActionTag, entities: Dict[str, Any]) -> EntityPayload:
    """Parse a raw entity map into the schema registered for ``action``.

    Args:
        action: The intent's action tag
        entities: Raw entity map from the intent

    Returns:
        Typed entity payload

    Raises:
        pydantic.ValidationError: If a supplied value has the wrong type
    """
    schema = ENTITY_SCHEMAS.get(action, NoEntities)
    return schema.model_validate(entities or {})
