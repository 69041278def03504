"""
Exception hierarchy for intent execution.

Handlers raise these internally; the dispatcher converts every one of them
into a failed ``ExecutionResult``. The classes exist so failures can be
classified (see ``ErrorClassifier``), not to be caught by callers.
"""

from typing import Optional


class EngineError(Exception):
    """Base exception for intent execution failures."""

    def __init__(self, message: str, guidance: Optional[str] = None):
        """
        Initialize engine error.

        Args:
            message: Machine-oriented error description
            guidance: Short, user-facing hint on how to recover
        """
        self.message = message
        self.guidance = guidance
        super().__init__(message)


class ValidationError(EngineError):
    """Required entity fields are missing or malformed (caller-correctable)."""

    pass


class NotFoundError(EngineError):
    """A record referenced by an update, delete or conversion does not exist."""

    pass


class StoreError(EngineError):
    """The record-store collaborator raised."""

    def __init__(
        self,
        message: str,
        guidance: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, guidance)
        self.cause = cause


class SecondaryEffectError(EngineError):
    """A best-effort step of a composite operation failed."""

    pass


class ResolutionMiss(EngineError):
    """An informal reference did not resolve to a record.

    Never raised out of the resolver on creates: a miss there silently
    degrades the reference to absent.
    """

    pass
