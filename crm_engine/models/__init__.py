"""Data models for the CRM intent engine.

This package contains Pydantic models for all business entities:
- BaseDataModel / RecordModel: Base classes with common configuration
- Company, Contact, Deal, Project, TimeEntry: Records owned by the store
- ProjectResource, ProjectExpense, BudgetInputs, ProjectBudget: Project financials
- StructuredIntent, ExecutionResult, ActionTag: Engine input and output
- Entity payloads: Per-action schemas for the intent's entity map
"""

from crm_engine.models.base import BaseDataModel, RecordModel
from crm_engine.models.budget import (
    BudgetInputs,
    ProjectBudget,
    ProjectExpense,
    ProjectMargins,
    ProjectResource,
    ProjectTimeStats,
)
from crm_engine.models.entities import ENTITY_SCHEMAS, EntityPayload, parse_entities
from crm_engine.models.intent import (
    ActionTag,
    EntityType,
    ExecutionResult,
    StructuredIntent,
)
from crm_engine.models.records import Company, Contact, Deal, Project, TimeEntry

__all__ = [
    "BaseDataModel",
    "RecordModel",
    "Company",
    "Contact",
    "Deal",
    "Project",
    "TimeEntry",
    "ProjectResource",
    "ProjectExpense",
    "BudgetInputs",
    "ProjectBudget",
    "ProjectTimeStats",
    "ProjectMargins",
    "ActionTag",
    "EntityType",
    "StructuredIntent",
    "ExecutionResult",
    "EntityPayload",
    "ENTITY_SCHEMAS",
    "parse_entities",
]
