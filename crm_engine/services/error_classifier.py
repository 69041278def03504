"""
Error classification for intent execution failures.
"""

import logging
from enum import Enum
from typing import Any, Dict

from pydantic import ValidationError as PydanticValidationError

from crm_engine.services.errors import (
    NotFoundError,
    ResolutionMiss,
    SecondaryEffectError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class ErrorKind(Enum):
    """Classification of execution failures."""

    VALIDATION = "validation"  # Caller-correctable input problem
    NOT_FOUND = "not_found"  # Referenced record absent
    STORE = "store"  # Record store raised
    SECONDARY_EFFECT = "secondary_effect"  # Best-effort step failed
    RESOLUTION_MISS = "resolution_miss"  # Informal reference unresolved
    UNKNOWN = "unknown"  # Anything else


class ErrorClassifier:
    """
    Classifies exceptions raised while executing an intent.

    Features:
    - Engine error taxonomy classification
    - Pydantic validation errors treated as caller input problems
    - Error description generation
    - Statistics tracking
    """

    def __init__(self):
        """Initialize error classifier with statistics tracking."""
        self.reset_statistics()

    def classify(self, exception: BaseException) -> ErrorKind:
        """
        Classify an exception into an error kind.

        Args:
            exception: The exception to classify

        Returns:
            ErrorKind classification
        """
        kind = self._kind_of(exception)
        self._stats[kind.value] += 1
        self._stats["total"] += 1
        return kind

    def _kind_of(self, exception: BaseException) -> ErrorKind:
        if isinstance(exception, (ValidationError, PydanticValidationError)):
            return ErrorKind.VALIDATION
        if isinstance(exception, NotFoundError):
            return ErrorKind.NOT_FOUND
        if isinstance(exception, StoreError):
            return ErrorKind.STORE
        if isinstance(exception, SecondaryEffectError):
            return ErrorKind.SECONDARY_EFFECT
        if isinstance(exception, ResolutionMiss):
            return ErrorKind.RESOLUTION_MISS
        return ErrorKind.UNKNOWN

    def is_caller_correctable(self, exception: BaseException) -> bool:
        """
        Check whether the user can fix the failure by rephrasing.

        Args:
            exception: The exception to check

        Returns:
            True for validation and not-found failures
        """
        return self._kind_of(exception) in (ErrorKind.VALIDATION, ErrorKind.NOT_FOUND)

    def get_error_description(self, exception: BaseException) -> str:
        """
        Get a human-readable error description for logs.

        Does not count towards the statistics.

        Args:
            exception: The exception to describe

        Returns:
            Error description string
        """
        kind = self._kind_of(exception)

        if kind is ErrorKind.STORE:
            cause = getattr(exception, "cause", None)
            if cause is not None:
                return f"Record store error ({type(cause).__name__}): {exception} - {kind.value}"
            return f"Record store error: {exception} - {kind.value}"

        if isinstance(exception, PydanticValidationError):
            return f"Invalid entities ({exception.error_count()} error(s)) - {kind.value}"

        return f"{type(exception).__name__}: {str(exception)} - {kind.value}"

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get error classification statistics.

        Returns:
            Dictionary with counts per error kind plus a total
        """
        return self._stats.copy()

    def reset_statistics(self):
        """Reset error statistics."""
        self._stats: Dict[str, int] = {kind.value: 0 for kind in ErrorKind}
        self._stats["total"] = 0
