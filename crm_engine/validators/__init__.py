"""Validation layer for intent entities."""

from crm_engine.validators.field_validators import FieldValidators, normalize_choice
from crm_engine.validators.intent_validator import IntentValidator
from crm_engine.validators.validation_report import (
    ValidationIssue,
    ValidationReport,
    ValidationSeverity,
)

__all__ = [
    "IntentValidator",
    "ValidationReport",
    "ValidationIssue",
    "ValidationSeverity",
    "FieldValidators",
    "normalize_choice",
]
