"""Filtering helpers for listing handlers."""

from decimal import Decimal
from typing import Optional, Union

Number = Union[int, float, Decimal]


def text_matches(term: Optional[str], *values: Optional[str]) -> bool:
    """
    Case-insensitive substring match of ``term`` against any value.

    An absent term matches everything.

    Example:
        >>> text_matches("tech", "TechCorp", "Software")
        True
    """
    if not term:
        return True
    needle = term.strip().lower()
    return any(needle in (value or "").lower() for value in values)


def in_range(
    value: Number, minimum: Optional[Number] = None, maximum: Optional[Number] = None
) -> bool:
    """Inclusive range check; absent bounds are open."""
    if minimum is not None and value < minimum:
        return False
    if maximum is not None and value > maximum:
        return False
    return True
