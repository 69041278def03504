"""
Two-step composite operations with a declared failure policy.

A composite operation runs a primary step and, once it succeeds, an
optional secondary step that receives the primary's result. The policy on
the secondary step decides what its failure means:

- ``ABORT_ALL``: the failure propagates and the whole operation fails
  (no rollback of the primary; the record store has no transactions).
- ``REPORT_BUT_CONTINUE``: the failure is logged and reported as a warning;
  the operation still succeeds with the primary's result.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional

from crm_engine.services.errors import SecondaryEffectError

logger = logging.getLogger(__name__)

PrimaryStep = Callable[[], Awaitable[Any]]
SecondaryStep = Callable[[Any], Awaitable[Any]]


class FailurePolicy(Enum):
    """What a failing secondary step does to the composite operation."""

    ABORT_ALL = "abort-all"
    REPORT_BUT_CONTINUE = "report-but-continue"


@dataclass
class CompositeOutcome:
    """Result of running a composite operation.

    Attributes:
        primary: Result of the primary step
        secondary: Result of the secondary step (None if skipped or failed)
        secondary_error: Failure of the secondary step under REPORT_BUT_CONTINUE
        warnings: Informational messages for the caller
    """

    primary: Any
    secondary: Any = None
    secondary_error: Optional[SecondaryEffectError] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def secondary_succeeded(self) -> bool:
        return self.secondary is not None and self.secondary_error is None


@dataclass
class CompositeOperation:
    """A primary step plus an optional dependent secondary step.

    Attributes:
        primary: Async callable producing the primary result
        secondary: Async callable taking the primary result
        secondary_policy: Failure policy for the secondary step
        description: Label used in logs and warnings

    Example:
        >>> operation = CompositeOperation(
        ...     primary=create_company,
        ...     secondary=create_first_deal,
        ...     secondary_policy=FailurePolicy.REPORT_BUT_CONTINUE,
        ...     description="first deal",
        ... )
        >>> outcome = await operation.run()
    """

    primary: PrimaryStep
    secondary: Optional[SecondaryStep] = None
    secondary_policy: FailurePolicy = FailurePolicy.REPORT_BUT_CONTINUE
    description: str = "secondary step"

    async def run(self) -> CompositeOutcome:
        """
        Run the primary step, then the secondary step if there is one.

        Returns:
            CompositeOutcome

        Raises:
            Exception: Whatever the primary step raises
            SecondaryEffectError: If the secondary step fails under ABORT_ALL
        """
        primary_result = await self.primary()
        outcome = CompositeOutcome(primary=primary_result)

        if self.secondary is None:
            return outcome

        try:
            outcome.secondary = await self.secondary(primary_result)
        except Exception as e:
            error = SecondaryEffectError(f"{self.description} failed: {e}")
            if self.secondary_policy is FailurePolicy.ABORT_ALL:
                raise error from e
            logger.warning(f"Primary step succeeded but {self.description} failed: {e}")
            outcome.secondary_error = error
            outcome.warnings.append(error.message)

        return outcome
