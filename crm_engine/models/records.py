"""CRM record models.

This module defines the records owned by the record store: companies,
contacts, deals, projects and time entries. The engine reads and writes
them through the store; relationships between them are plain optional
identifiers (an empty value means "no reference").
"""
import datetime as dt
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import Field, field_validator

from crm_engine.models.base import RecordModel, to_decimal
from crm_engine.models.budget import ProjectBudget

CompanyStatus = Literal["active", "inactive", "prospect"]
ContactStatus = Literal["active", "inactive"]
DealStage = Literal[
    "prospecting",
    "qualification",
    "proposal",
    "negotiation",
    "closed-won",
    "closed-lost",
]
DealStatus = Literal["active", "won", "lost", "on-hold"]
Priority = Literal["low", "medium", "high", "critical"]
ProjectStatus = Literal["planning", "active", "on-hold", "completed", "cancelled"]
ProjectType = Literal["development", "consulting", "implementation", "support", "other"]

OPEN_DEAL_STAGES = ("prospecting", "qualification", "proposal", "negotiation")


class Company(RecordModel):
    """A client or prospect organisation.

    Example:
        >>> Company(name="Acme Corp").status
        'active'
    """

    name: str = Field(..., min_length=1, description="Company name")
    industry: str = ""
    size: str = ""
    website: str = ""
    phone: str = ""
    email: str = ""
    address: Union[str, Dict[str, Any]] = ""
    notes: str = ""
    tags: List[str] = Field(default_factory=list)
    status: CompanyStatus = "active"

    @field_validator("name")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        """Validate that the name is not empty or whitespace only."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace")
        return v.strip()


class Contact(RecordModel):
    """A person, optionally attached to a company."""

    company_id: Optional[str] = None
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str = ""
    phone: str = ""
    position: str = ""
    department: str = ""
    is_primary: bool = False
    notes: str = ""
    tags: List[str] = Field(default_factory=list)
    status: ContactStatus = "active"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Deal(RecordModel):
    """A sales opportunity.

    A deal moves through the open stages until it is closed; converting it
    into a project closes it as ``closed-won`` and records the project id.

    Attributes:
        company_id: Owning company (optional)
        title: Deal title
        value: Deal value in ``currency``
        probability: Win probability percentage (0-100)
        stage: Pipeline stage
        converted_to_project: Whether a project was created from this deal
        project_id: The project created from this deal
    """

    company_id: Optional[str] = None
    title: str = Field(..., min_length=1)
    description: str = ""
    value: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str = "USD"
    probability: int = Field(default=25, ge=0, le=100)
    stage: DealStage = "prospecting"
    priority: Priority = "medium"
    expected_close_date: Optional[dt.date] = None
    actual_close_date: Optional[dt.date] = None
    notes: str = ""
    tags: List[str] = Field(default_factory=list)
    status: DealStatus = "active"
    converted_to_project: bool = False
    converted_to_project_at: Optional[dt.datetime] = None
    project_id: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal for precision."""
        return to_decimal(v)

    @property
    def is_open(self) -> bool:
        return self.stage in OPEN_DEAL_STAGES


class Project(RecordModel):
    """A delivery project, usually created from a won deal.

    Attributes:
        company_id: Client company (optional)
        deal_id: Deal the project was created from (optional)
        title: Project title
        status: Delivery status
        budget: Fully costed budget; always produced by ``compute_budget``
        progress_percentage: Completion estimate (0-100)
        created_from_deal: Whether the project came from a deal conversion
    """

    company_id: Optional[str] = None
    deal_id: Optional[str] = None
    title: str = Field(..., min_length=1)
    description: str = ""
    project_manager: Optional[str] = None
    status: ProjectStatus = "planning"
    priority: Priority = "medium"
    type: ProjectType = "development"
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    budget: ProjectBudget = Field(default_factory=ProjectBudget)
    progress_percentage: int = Field(default=0, ge=0, le=100)
    tags: List[str] = Field(default_factory=list)
    notes: str = ""
    created_from_deal: bool = False


class TimeEntry(RecordModel):
    """Time worked, in minutes, optionally against a project.

    Example:
        >>> TimeEntry(duration=90).hours
        Decimal('1.5')
    """

    project_id: Optional[str] = None
    company_id: Optional[str] = None
    resource_name: str = "Default User"
    description: str = ""
    duration: int = Field(default=60, ge=0, description="Duration in minutes")
    date: dt.date = Field(default_factory=dt.date.today)
    billable: bool = True
    hourly_rate: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str = "USD"
    tags: List[str] = Field(default_factory=list)

    @field_validator("hourly_rate", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        """Convert numeric values to Decimal for precision."""
        return to_decimal(v)

    @property
    def hours(self) -> Decimal:
        return Decimal(self.duration) / Decimal("60")
