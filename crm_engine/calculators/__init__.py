"""Calculator modules for the CRM intent engine."""

from crm_engine.calculators.budget_calculator import (
    add_expense,
    add_resource,
    calculate_expense_cost,
    calculate_resource_cost,
    compute_budget,
    remove_expense,
    remove_resource,
    update_budget_inputs,
    update_expense,
    update_resource,
)

__all__ = [
    "compute_budget",
    "calculate_resource_cost",
    "calculate_expense_cost",
    "update_budget_inputs",
    "add_resource",
    "update_resource",
    "remove_resource",
    "add_expense",
    "update_expense",
    "remove_expense",
]
