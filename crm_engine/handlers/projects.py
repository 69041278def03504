"""
Project handlers.

Projects always carry a budget produced by ``compute_budget``. Creating a
project computes it from the intent; updating revenue, contingency,
currency or line items recomputes it in full.
"""

import logging
from typing import Any, Dict, Tuple

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_snake

from crm_engine.calculators.budget_calculator import (
    add_expense,
    add_resource,
    compute_budget,
    remove_expense,
    remove_resource,
    update_budget_inputs,
    update_expense,
    update_resource,
)
from crm_engine.handlers.base import (
    ActionHandler,
    DeleteHandler,
    GetHandler,
    UpdateHandler,
    compact,
)
from crm_engine.handlers.filters import in_range, text_matches
from crm_engine.models.budget import BudgetInputs, ProjectBudget
from crm_engine.models.entities import (
    CreateProjectEntities,
    DeleteProjectEntities,
    GetProjectsEntities,
    UpdateProjectEntities,
)
from crm_engine.models.intent import ActionTag, ExecutionResult
from crm_engine.models.records import Project
from crm_engine.services.errors import NotFoundError, ValidationError
from crm_engine.validators.field_validators import normalize_choice

logger = logging.getLogger(__name__)


def project_fields(entities: CreateProjectEntities) -> Dict[str, Any]:
    """Map project entities onto Project record fields (budget excluded)."""
    return compact(
        {
            "title": entities.project_title,
            "description": entities.project_description,
            "status": normalize_choice(entities.project_status),
            "deal_id": entities.deal_id,
            "start_date": entities.start_date,
            "end_date": entities.end_date,
            "tags": entities.tags,
        }
    )


def budget_changes(entities: CreateProjectEntities) -> Dict[str, Any]:
    """Budget inputs supplied by the intent."""
    revenue = entities.project_budget
    if revenue is None:
        revenue = entities.deal_value
    return compact(
        {
            "total_revenue": revenue,
            "contingency_percentage": entities.contingency_percentage,
            "currency": entities.currency,
            "resources": entities.resources,
            "expenses": entities.expenses,
        }
    )


def apply_line_item_changes(budget: ProjectBudget, entities: UpdateProjectEntities) -> ProjectBudget:
    """
    Apply single line item changes: updates, then removals, then additions.

    Raises:
        NotFoundError: If an update or removal names an unknown line item
        ValidationError: If an update gives a field a value of the wrong type
    """
    try:
        for change in entities.update_resources or []:
            item_id, fields = split_change(change)
            budget = update_resource(budget, item_id, fields)
        for item_id in entities.remove_resource_ids or []:
            budget = remove_resource(budget, item_id)
        for resource in entities.add_resources or []:
            budget = add_resource(budget, resource)
        for change in entities.update_expenses or []:
            item_id, fields = split_change(change)
            budget = update_expense(budget, item_id, fields)
        for item_id in entities.remove_expense_ids or []:
            budget = remove_expense(budget, item_id)
        for expense in entities.add_expenses or []:
            budget = add_expense(budget, expense)
    except KeyError as e:
        raise NotFoundError(
            e.args[0],
            guidance="I couldn't find that resource or expense on the project budget.",
        ) from e
    except PydanticValidationError as e:
        fields = ", ".join(str(error["loc"][-1]) for error in e.errors())
        raise ValidationError(
            f"Invalid line item values: {fields}",
            guidance="Some of the resource or expense details have the wrong format.",
        ) from e
    return budget


def split_change(change: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    """Split an ``{"id": ..., **fields}`` entry, snake-casing the field names."""
    fields = {to_snake(key): value for key, value in change.items() if key != "id"}
    return str(change["id"]), fields


class CreateProjectHandler(ActionHandler):
    action = ActionTag.CREATE_PROJECT

    async def execute(self, entities: CreateProjectEntities) -> ExecutionResult:
        company_id = await self.resolve_company_id(entities)

        inputs = BudgetInputs.model_validate(
            {
                "contingency_percentage": self.config.default_contingency_percentage,
                "currency": self.config.default_currency,
                **budget_changes(entities),
            }
        )
        fields = project_fields(entities)
        fields["company_id"] = company_id
        fields["budget"] = compute_budget(inputs)

        project = await self.call_store(self.store.projects.create(fields))
        logger.info(
            f"Created project {project.id} (company: {company_id}, "
            f"margin: {project.budget.margin_percentage:.2f}%)"
        )
        return ExecutionResult.ok(data=project, message=f"Created project \"{project.title}\"")

    def failure_prefix(self, entities: CreateProjectEntities) -> str:
        return f"Failed to create project \"{entities.project_title}\"."


class GetProjectsHandler(GetHandler):
    """Lists projects filtered by text, status, margin and budget."""

    action = ActionTag.GET_PROJECTS
    plural = "projects"

    def matches(self, project: Project, entities: GetProjectsEntities, context) -> bool:
        if not text_matches(entities.search_term, project.title, project.description):
            return False
        if entities.status and normalize_choice(entities.status) not in project.status:
            return False
        budget = project.budget
        if not in_range(budget.margin_percentage, entities.min_margin, entities.max_margin):
            return False
        if not in_range(budget.total_revenue, entities.min_budget, entities.max_budget):
            return False
        return True


class UpdateProjectHandler(UpdateHandler):
    action = ActionTag.UPDATE_PROJECT

    async def target_id(self, entities: UpdateProjectEntities) -> str:
        return await self.resolve_target(entities.project_id)

    async def changes(
        self, entities: UpdateProjectEntities, record_id: str
    ) -> Dict[str, Any]:
        changes = project_fields(entities)
        if entities.progress_percentage is not None:
            changes["progress_percentage"] = entities.progress_percentage
        if entities.company_id or entities.company_name:
            company_id = await self.resolve_company_id(entities)
            if company_id:
                changes["company_id"] = company_id

        budget_update = budget_changes(entities)
        if budget_update or entities.has_line_item_changes():
            current = await self.call_store(self.store.projects.get(record_id))
            if current is None:
                raise self.not_found(record_id)
            budget = update_budget_inputs(current.budget, **budget_update)
            changes["budget"] = apply_line_item_changes(budget, entities)
            logger.debug(f"Recomputed budget for project {record_id}")
        return changes

    def describe(self, project: Project) -> str:
        return project.title


class DeleteProjectHandler(DeleteHandler):
    action = ActionTag.DELETE_PROJECT

    async def target_id(self, entities: DeleteProjectEntities) -> str:
        return await self.resolve_target(entities.project_id)
