"""Base models for all CRM data models.

This module provides the base Pydantic models with common configuration
and helper methods shared by records, budgets and intent payloads.
"""

import datetime as dt
import uuid
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_record_id() -> str:
    """Generate a new record identifier.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def utc_now() -> dt.datetime:
    """Current timestamp in UTC."""
    return dt.datetime.now(dt.timezone.utc)


def to_decimal(v: Any) -> Optional[Decimal]:
    """Convert a numeric value to Decimal for precision.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.

    Args:
        v: The value to convert (None passes through)

    Returns:
        The value as a Decimal, or None

    Raises:
        ValueError: If the value cannot be converted to Decimal
    """
    if v is None or isinstance(v, Decimal):
        return v
    if isinstance(v, bool):
        raise ValueError(f"Cannot convert {v} to Decimal")
    if isinstance(v, str) and not v.strip():
        return None
    try:
        return Decimal(str(v).strip())
    except (ValueError, TypeError, ArithmeticError) as e:
        raise ValueError(f"Cannot convert {v} to Decimal: {e}")


class BaseDataModel(BaseModel):
    """Base class for all data models.

    Provides common configuration for:
    - Validation with type checking
    - camelCase aliases so payloads from the chat/LLM side validate as-is
    - Serialization to/from dictionaries

    Example:
        >>> class Person(BaseDataModel):
        ...     first_name: str
        >>> Person(firstName="Ada").first_name
        'Ada'
        >>> Person(first_name="Ada").model_dump()
        {'first_name': 'Ada'}
    """

    model_config = ConfigDict(
        # Allow arbitrary types like Decimal, date, time
        arbitrary_types_allowed=True,
        # Validate on assignment to catch errors early
        validate_assignment=True,
        strict=False,
        # Accept both first_name and firstName
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=False,
    )


class RecordModel(BaseDataModel):
    """Base class for records owned by the record store.

    Attributes:
        id: Record identifier assigned on creation
        created_at: Creation timestamp (UTC)
        updated_at: Last modification timestamp (UTC)
    """

    id: str = Field(default_factory=new_record_id)
    created_at: dt.datetime = Field(default_factory=utc_now)
    updated_at: dt.datetime = Field(default_factory=utc_now)
