"""Intent and result models.

``StructuredIntent`` is what the language-model collaborator hands to the
engine; ``ExecutionResult`` is the engine's only output contract.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class EntityType(str, Enum):
    """Record types the engine can act on."""

    COMPANY = "company"
    CONTACT = "contact"
    DEAL = "deal"
    PROJECT = "project"
    TIME_ENTRY = "time_entry"

    @property
    def label(self) -> str:
        """Human readable name used in messages."""
        return self.value.replace("_", " ")


class ActionTag(str, Enum):
    """Closed vocabulary of actions the engine executes.

    Any string outside the vocabulary maps to ``UNKNOWN`` instead of
    raising, so a malformed tag from upstream never breaks dispatch.

    Example:
        >>> ActionTag("create_company") is ActionTag.CREATE_COMPANY
        True
        >>> ActionTag("launch_rocket") is ActionTag.UNKNOWN
        True
    """

    CREATE_COMPANY = "create_company"
    CREATE_CONTACT = "create_contact"
    CREATE_DEAL = "create_deal"
    CREATE_PROJECT = "create_project"
    CREATE_TIME_ENTRY = "create_time_entry"
    GET_COMPANIES = "get_companies"
    GET_CONTACTS = "get_contacts"
    GET_DEALS = "get_deals"
    GET_PROJECTS = "get_projects"
    GET_TIME_ENTRIES = "get_time_entries"
    UPDATE_COMPANY = "update_company"
    UPDATE_CONTACT = "update_contact"
    UPDATE_DEAL = "update_deal"
    UPDATE_PROJECT = "update_project"
    UPDATE_TIME_ENTRY = "update_time_entry"
    DELETE_COMPANY = "delete_company"
    DELETE_CONTACT = "delete_contact"
    DELETE_DEAL = "delete_deal"
    DELETE_PROJECT = "delete_project"
    DELETE_TIME_ENTRY = "delete_time_entry"
    HELP = "help"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
            for member in cls:
                if member.value == normalized:
                    return member
        return cls.UNKNOWN

    @property
    def verb(self) -> Optional[str]:
        """create, get, update or delete; None for help/unknown."""
        verb, _, _ = self.value.partition("_")
        return verb if verb in ("create", "get", "update", "delete") else None

    @property
    def entity_type(self) -> Optional[EntityType]:
        """Record type the action targets; None for help/unknown."""
        if self.verb is None:
            return None
        return _NOUNS.get(self.value.partition("_")[2])


_NOUNS = {
    "company": EntityType.COMPANY,
    "companies": EntityType.COMPANY,
    "contact": EntityType.CONTACT,
    "contacts": EntityType.CONTACT,
    "deal": EntityType.DEAL,
    "deals": EntityType.DEAL,
    "project": EntityType.PROJECT,
    "projects": EntityType.PROJECT,
    "time_entry": EntityType.TIME_ENTRY,
    "time_entries": EntityType.TIME_ENTRY,
}


class StructuredIntent(BaseModel):
    """A structured intent produced by the language-model collaborator.

    Immutable once received.

    Attributes:
        action: Action tag (unrecognized strings become ``unknown``)
        entities: Open map of extracted entity values
        confidence: Model confidence in [0, 1]; logged, not acted on
        original_text: The user's raw message
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    action: ActionTag = ActionTag.UNKNOWN
    entities: Dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    original_text: str = Field(
        default="",
        validation_alias=AliasChoices("original_text", "originalText", "originalMessage"),
    )

    @field_validator("action", mode="before")
    @classmethod
    def parse_action(cls, v):
        """Map any tag outside the vocabulary to ``unknown``."""
        return ActionTag(v)

    @field_validator("entities", mode="before")
    @classmethod
    def default_entities(cls, v):
        """Treat a null entity map as empty."""
        return {} if v is None else v


class ExecutionResult(BaseModel):
    """Uniform success/failure result of executing one intent.

    Invariant: a failed result always carries ``error``; a successful one
    always carries ``data`` or ``message``.

    Attributes:
        success: Whether the action succeeded
        data: Created or fetched record(s)
        error: Machine-oriented failure description
        message: Human-readable summary, fallback text for reply synthesis
        warnings: Informational failures of best-effort side effects

    Example:
        >>> ExecutionResult.fail("Company name is required").success
        False
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    data: Any = None
    error: Optional[str] = None
    message: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_outcome(self) -> "ExecutionResult":
        """Enforce the success/error invariant."""
        if not self.success and not self.error:
            raise ValueError("a failed result must carry an error")
        if self.success and self.data is None and not self.message:
            raise ValueError("a successful result must carry data or a message")
        return self

    @classmethod
    def ok(
        cls,
        data: Any = None,
        message: Optional[str] = None,
        warnings: Optional[List[str]] = None,
    ) -> "ExecutionResult":
        return cls(success=True, data=data, message=message, warnings=warnings or [])

    @classmethod
    def fail(
        cls, error: str, message: Optional[str] = None, data: Any = None
    ) -> "ExecutionResult":
        return cls(success=False, error=error or "Unknown error occurred", message=message, data=data)
