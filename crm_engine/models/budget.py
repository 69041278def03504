"""Project budget data models.

This module defines the budget line items (resources and expenses), the
caller-facing ``BudgetInputs`` shape and the stored ``ProjectBudget`` shape
that adds the derived cost and margin figures.
"""
import datetime as dt
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from crm_engine.models.base import BaseDataModel, new_record_id, to_decimal

ResourceType = Literal["internal", "external", "contractor"]
RateType = Literal["hourly", "daily"]
ExpenseCategory = Literal[
    "software", "hardware", "travel", "materials", "licenses", "other"
]
ExpenseStatus = Literal["planned", "approved", "ordered", "received", "paid"]

DERIVED_BUDGET_FIELDS = (
    "total_resource_cost",
    "total_expense_cost",
    "contingency_cost",
    "total_cost",
    "gross_margin",
    "margin_percentage",
)


class ProjectResource(BaseDataModel):
    """A person or team allocated to a project.

    Cost contribution depends on ``rate_type``: daily resources cost
    ``daily_rate × days_allocated``, hourly resources cost
    ``hourly_rate × hours_allocated``.

    Attributes:
        id: Resource identifier
        name: Resource name
        type: internal, external or contractor
        role: Role on the project
        rate_type: hourly or daily
        hourly_rate: Hourly cost rate
        daily_rate: Daily cost rate (daily resources)
        hours_allocated: Planned hours
        days_allocated: Planned days (daily resources)
        hours_actual: Hours booked so far (informational)
        currency: ISO currency code
        start_date: Allocation start
        end_date: Allocation end
        skills: Skill tags
        notes: Free text

    Example:
        >>> resource = ProjectResource(rate_type="hourly", hourly_rate=50, hours_allocated=10)
        >>> resource.hourly_rate
        Decimal('50')
    """

    id: str = Field(default_factory=new_record_id)
    name: str = ""
    type: ResourceType = "internal"
    role: str = ""
    rate_type: RateType = "hourly"
    hourly_rate: Decimal = Field(default=Decimal("0"), ge=0)
    daily_rate: Optional[Decimal] = Field(default=None, ge=0)
    hours_allocated: Decimal = Field(default=Decimal("0"), ge=0)
    days_allocated: Optional[Decimal] = Field(default=None, ge=0)
    hours_actual: Optional[Decimal] = Field(default=None, ge=0)
    currency: str = "USD"
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    skills: List[str] = Field(default_factory=list)
    notes: Optional[str] = None

    @field_validator(
        "hourly_rate",
        "daily_rate",
        "hours_allocated",
        "days_allocated",
        "hours_actual",
        mode="before",
    )
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal for precision."""
        return to_decimal(v)


class ProjectExpense(BaseDataModel):
    """A non-labour cost planned for a project.

    Only ``planned_cost`` feeds the budget; ``actual_cost`` is informational.
    """

    id: str = Field(default_factory=new_record_id)
    category: ExpenseCategory = "other"
    description: str = ""
    planned_cost: Decimal = Field(default=Decimal("0"), ge=0)
    actual_cost: Optional[Decimal] = Field(default=None, ge=0)
    currency: str = "USD"
    due_date: Optional[dt.date] = None
    vendor: Optional[str] = None
    status: ExpenseStatus = "planned"
    notes: Optional[str] = None

    @field_validator("planned_cost", "actual_cost", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal for precision."""
        return to_decimal(v)


class BudgetInputs(BaseDataModel):
    """Caller-supplied part of a project budget.

    The derived figures are deliberately absent: they are only ever
    produced by ``compute_budget`` and passing them here is rejected.

    Attributes:
        total_revenue: Revenue expected from the project (usually the deal value)
        resources: Allocated resources
        expenses: Planned expenses
        contingency_percentage: Contingency on top of costs (0-100)
        currency: ISO currency code
    """

    total_revenue: Decimal = Field(default=Decimal("0"))
    resources: List[ProjectResource] = Field(default_factory=list)
    expenses: List[ProjectExpense] = Field(default_factory=list)
    contingency_percentage: Decimal = Field(default=Decimal("10"), ge=0, le=100)
    currency: str = "USD"

    @field_validator("total_revenue", "contingency_percentage", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal for precision."""
        return to_decimal(v)


class ProjectBudget(BudgetInputs):
    """Fully costed project budget as stored on a Project.

    Attributes:
        total_resource_cost: Sum of resource costs
        total_expense_cost: Sum of planned expense costs
        contingency_cost: Contingency on resources plus expenses
        total_cost: Resources + expenses + contingency
        gross_margin: Revenue minus total cost
        margin_percentage: Gross margin as a percentage of revenue (0 without revenue)
    """

    total_resource_cost: Decimal = Decimal("0.00")
    total_expense_cost: Decimal = Decimal("0.00")
    contingency_cost: Decimal = Decimal("0.00")
    total_cost: Decimal = Decimal("0.00")
    gross_margin: Decimal = Decimal("0.00")
    margin_percentage: Decimal = Decimal("0.00")

    def to_inputs(self) -> BudgetInputs:
        """Strip the derived figures, returning the mutable input shape.

        Returns:
            BudgetInputs carrying the same revenue, line items and contingency
        """
        return BudgetInputs.model_validate(
            self.model_dump(exclude=set(DERIVED_BUDGET_FIELDS))
        )


class ProjectTimeStats(BaseDataModel):
    """Logged time on a project against its budgeted hours.

    Attributes:
        project_id: Project the entries were logged against
        total_tracked_hours: All logged hours
        total_billable_hours: Billable logged hours
        tracked_revenue: Billable hours times their hourly rates
        budgeted_hours: Hours allocated to the project's resources
        remaining_hours: Budgeted hours not yet logged (never negative)
        hours_utilization: Tracked hours as a percentage of budgeted hours
        average_hourly_rate: Tracked revenue per billable hour
        last_activity: Date of the latest entry, if any
    """

    project_id: str
    total_tracked_hours: Decimal = Decimal("0")
    total_billable_hours: Decimal = Decimal("0")
    tracked_revenue: Decimal = Decimal("0")
    budgeted_hours: Decimal = Decimal("0")
    remaining_hours: Decimal = Decimal("0")
    hours_utilization: Decimal = Decimal("0")
    average_hourly_rate: Decimal = Decimal("0")
    last_activity: Optional[dt.date] = None


class ProjectMargins(BaseDataModel):
    """Budgeted margin against the margin implied by logged time."""

    budgeted_margin: Decimal = Decimal("0")
    actual_cost: Decimal = Decimal("0")
    actual_margin: Decimal = Decimal("0")
    variance: Decimal = Decimal("0")
