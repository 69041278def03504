"""Budget calculator for project financials.

This module implements the project budget calculation:
- Resource cost per rate type (hourly or daily)
- Planned expense cost
- Contingency on resources plus expenses
- Total cost, gross margin and margin percentage
- Logged time statistics and actual against budgeted margin

It also provides helpers that change a budget's line items. Every helper
returns a freshly computed ``ProjectBudget``; derived figures are never
patched incrementally.
"""

from decimal import Decimal
from typing import Any, Dict, Iterable, Union

from crm_engine.models.budget import (
    BudgetInputs,
    ProjectBudget,
    ProjectExpense,
    ProjectMargins,
    ProjectResource,
    ProjectTimeStats,
)
from crm_engine.models.records import Project, TimeEntry

BudgetLike = Union[BudgetInputs, ProjectBudget]


def calculate_resource_cost(resource: ProjectResource) -> Decimal:
    """Calculate the planned cost of one resource.

    Daily resources cost ``daily_rate × days_allocated``. A daily resource
    without a daily rate or allocated days falls back to the hourly
    calculation, as do hourly resources: ``hourly_rate × hours_allocated``.

    Args:
        resource: The resource to cost

    Returns:
        Cost as an unrounded Decimal

    Example:
        >>> calculate_resource_cost(
        ...     ProjectResource(rate_type="daily", daily_rate=400, days_allocated=5)
        ... )
        Decimal('2000')
    """
    if resource.rate_type == "daily" and resource.daily_rate and resource.days_allocated:
        return resource.daily_rate * resource.days_allocated
    return resource.hourly_rate * resource.hours_allocated


def calculate_expense_cost(expenses: Iterable[ProjectExpense]) -> Decimal:
    """Sum the planned cost of expenses (actual cost is informational)."""
    return sum((expense.planned_cost for expense in expenses), Decimal("0"))


def compute_budget(inputs: BudgetLike) -> ProjectBudget:
    """Compute a fully costed project budget.

    The calculation runs in this order:
    1. total_resource_cost = Σ resource costs
    2. total_expense_cost = Σ planned expense costs
    3. contingency_cost = (resources + expenses) × contingency% / 100
    4. total_cost = resources + expenses + contingency
    5. gross_margin = total_revenue - total_cost
    6. margin_percentage = gross_margin / total_revenue × 100, or 0 without revenue

    Pure and deterministic. Figures are exact Decimals and are not rounded;
    presentation rounds them (see ``crm_engine.cli.utils.formatters``).

    Args:
        inputs: Budget inputs (a stored ProjectBudget is accepted too; its
            derived figures are ignored and recomputed)

    Returns:
        ProjectBudget with all derived figures

    Example:
        >>> budget = compute_budget(BudgetInputs(
        ...     total_revenue=1000,
        ...     resources=[ProjectResource(hourly_rate=50, hours_allocated=10)],
        ...     expenses=[ProjectExpense(planned_cost=100)],
        ...     contingency_percentage=10,
        ... ))
        >>> budget.margin_percentage
        Decimal('34.00')
    """
    base = _as_inputs(inputs)

    total_resource_cost = sum(
        (calculate_resource_cost(resource) for resource in base.resources),
        Decimal("0"),
    )
    total_expense_cost = calculate_expense_cost(base.expenses)

    contingency_cost = (
        (total_resource_cost + total_expense_cost)
        * base.contingency_percentage
        / Decimal("100")
    )

    total_cost = total_resource_cost + total_expense_cost + contingency_cost
    gross_margin = base.total_revenue - total_cost

    # Division by zero guard: no revenue means no margin percentage
    if base.total_revenue > Decimal("0"):
        margin_percentage = gross_margin / base.total_revenue * Decimal("100")
    else:
        margin_percentage = Decimal("0")

    return ProjectBudget(
        **base.model_dump(exclude={"resources", "expenses"}),
        resources=base.resources,
        expenses=base.expenses,
        total_resource_cost=total_resource_cost,
        total_expense_cost=total_expense_cost,
        contingency_cost=contingency_cost,
        total_cost=total_cost,
        gross_margin=gross_margin,
        margin_percentage=margin_percentage,
    )


def calculate_project_time_stats(
    project: Project, time_entries: Iterable[TimeEntry]
) -> ProjectTimeStats:
    """Summarize the time logged against a project.

    Entries for other projects are ignored. Budgeted hours are the
    resources' ``hours_allocated``; the average hourly rate is taken over
    billable entries only.

    Args:
        project: The project
        time_entries: Time entries (any project)

    Returns:
        ProjectTimeStats with unrounded figures
    """
    entries = [entry for entry in time_entries if entry.project_id == project.id]
    billable = [entry for entry in entries if entry.billable]

    tracked_hours = sum((entry.hours for entry in entries), Decimal("0"))
    billable_hours = sum((entry.hours for entry in billable), Decimal("0"))
    tracked_revenue = sum(
        (entry.hours * entry.hourly_rate for entry in billable), Decimal("0")
    )
    budgeted_hours = sum(
        (resource.hours_allocated for resource in project.budget.resources),
        Decimal("0"),
    )

    if billable_hours > Decimal("0"):
        average_hourly_rate = tracked_revenue / billable_hours
    else:
        average_hourly_rate = Decimal("0")
    if budgeted_hours > Decimal("0"):
        hours_utilization = tracked_hours / budgeted_hours * Decimal("100")
    else:
        hours_utilization = Decimal("0")

    return ProjectTimeStats(
        project_id=project.id,
        total_tracked_hours=tracked_hours,
        total_billable_hours=billable_hours,
        tracked_revenue=tracked_revenue,
        budgeted_hours=budgeted_hours,
        remaining_hours=max(Decimal("0"), budgeted_hours - tracked_hours),
        hours_utilization=hours_utilization,
        average_hourly_rate=average_hourly_rate,
        last_activity=max((entry.date for entry in entries), default=None),
    )


def calculate_project_margins(
    project: Project, time_entries: Iterable[TimeEntry]
) -> ProjectMargins:
    """Compare a project's budgeted margin with the margin from logged time.

    The actual cost is every tracked hour at the average billable rate, so
    non-billable hours still cost money:
    1. actual_cost = total_tracked_hours × average_hourly_rate
    2. actual_margin = total_revenue - actual_cost
    3. variance = actual_margin - budgeted gross_margin

    Pure and deterministic.

    Args:
        project: The project (its stored budget supplies revenue and margin)
        time_entries: Time entries (any project)

    Returns:
        ProjectMargins with unrounded figures

    Example:
        >>> project = Project(title="Portal", budget=compute_budget(BudgetInputs(
        ...     total_revenue=1000,
        ...     resources=[ProjectResource(hourly_rate=50, hours_allocated=10)],
        ...     contingency_percentage=0,
        ... )))
        >>> entries = [TimeEntry(project_id=project.id, duration=480, hourly_rate=50)]
        >>> calculate_project_margins(project, entries).variance
        Decimal('100')
    """
    stats = calculate_project_time_stats(project, time_entries)
    budget = project.budget

    actual_cost = stats.total_tracked_hours * stats.average_hourly_rate
    actual_margin = budget.total_revenue - actual_cost
    return ProjectMargins(
        budgeted_margin=budget.gross_margin,
        actual_cost=actual_cost,
        actual_margin=actual_margin,
        variance=actual_margin - budget.gross_margin,
    )


def update_budget_inputs(budget: BudgetLike, **changes: Any) -> ProjectBudget:
    """Change top-level inputs (revenue, contingency, currency) and recompute.

    Args:
        budget: Current budget
        **changes: BudgetInputs fields to replace

    Returns:
        Recomputed ProjectBudget
    """
    data = _as_inputs(budget).model_dump()
    data.update({key: value for key, value in changes.items() if value is not None})
    return compute_budget(BudgetInputs.model_validate(data))


def add_resource(budget: BudgetLike, resource: ProjectResource) -> ProjectBudget:
    """Append a resource and recompute."""
    base = _as_inputs(budget)
    return _recompute(base, resources=[*base.resources, resource])


def update_resource(
    budget: BudgetLike, resource_id: str, changes: Dict[str, Any]
) -> ProjectBudget:
    """Apply partial changes to one resource and recompute.

    Raises:
        KeyError: If no resource has ``resource_id``
    """
    base = _as_inputs(budget)
    _require(base.resources, resource_id, "resource")
    resources = [
        ProjectResource.model_validate({**r.model_dump(), **changes, "id": r.id})
        if r.id == resource_id
        else r
        for r in base.resources
    ]
    return _recompute(base, resources=resources)


def remove_resource(budget: BudgetLike, resource_id: str) -> ProjectBudget:
    """Remove a resource and recompute.

    Raises:
        KeyError: If no resource has ``resource_id``
    """
    base = _as_inputs(budget)
    _require(base.resources, resource_id, "resource")
    return _recompute(
        base, resources=[r for r in base.resources if r.id != resource_id]
    )


def add_expense(budget: BudgetLike, expense: ProjectExpense) -> ProjectBudget:
    """Append an expense and recompute."""
    base = _as_inputs(budget)
    return _recompute(base, expenses=[*base.expenses, expense])


def update_expense(
    budget: BudgetLike, expense_id: str, changes: Dict[str, Any]
) -> ProjectBudget:
    """Apply partial changes to one expense and recompute.

    Raises:
        KeyError: If no expense has ``expense_id``
    """
    base = _as_inputs(budget)
    _require(base.expenses, expense_id, "expense")
    expenses = [
        ProjectExpense.model_validate({**e.model_dump(), **changes, "id": e.id})
        if e.id == expense_id
        else e
        for e in base.expenses
    ]
    return _recompute(base, expenses=expenses)


def remove_expense(budget: BudgetLike, expense_id: str) -> ProjectBudget:
    """Remove an expense and recompute.

    Raises:
        KeyError: If no expense has ``expense_id``
    """
    base = _as_inputs(budget)
    _require(base.expenses, expense_id, "expense")
    return _recompute(base, expenses=[e for e in base.expenses if e.id != expense_id])


def _as_inputs(budget: BudgetLike) -> BudgetInputs:
    if isinstance(budget, ProjectBudget):
        return budget.to_inputs()
    return budget


def _recompute(base: BudgetInputs, **line_items: Any) -> ProjectBudget:
    return compute_budget(base.model_copy(update=line_items))


def _require(items, item_id: str, kind: str) -> None:
    if not any(item.id == item_id for item in items):
        raise KeyError(f"No {kind} with id '{item_id}' in budget")
