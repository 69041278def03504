"""Validation report for collecting intent entity issues."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, List, Optional


class ValidationSeverity(IntEnum):
    """Severity levels for validation issues."""

    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass
class ValidationIssue:
    """Represents a single validation issue.

    Attributes:
        severity: The severity level of the issue
        field: The entity field name (upstream camelCase name)
        message: Machine-oriented description of the issue
        value: The value that caused the issue
        guidance: User-facing hint on how to fix it
    """

    severity: ValidationSeverity
    field: str
    message: str
    value: Any = None
    guidance: Optional[str] = None

    def __str__(self) -> str:
        """Return string representation of the issue.

        Returns:
            Formatted string with severity, field, and message
        """
        return f"[{self.severity.name}] {self.field}: {self.message}"


class ValidationReport:
    """Collects and manages validation issues for one intent.

    Example:
        >>> report = ValidationReport()
        >>> report.add_error("companyName", "Company name is required",
        ...                  guidance="Please provide a company name.")
        >>> report.is_valid()
        False
        >>> report.error_message()
        'Company name is required'
    """

    def __init__(self) -> None:
        """Initialize an empty validation report."""
        self.issues: List[ValidationIssue] = []

    @property
    def error_count(self) -> int:
        """Count of error-level issues."""
        return len(self.get_errors())

    @property
    def warning_count(self) -> int:
        """Count of warning-level issues."""
        return len(self.get_warnings())

    def is_valid(self) -> bool:
        """Check if validation passed (no errors).

        Warnings and info messages do not affect validity.

        Returns:
            True if no errors are present, False otherwise
        """
        return self.error_count == 0

    def has_errors(self) -> bool:
        """Check if the report has any errors."""
        return self.error_count > 0

    def add_error(
        self,
        field: str,
        message: str,
        value: Any = None,
        guidance: Optional[str] = None,
    ) -> None:
        """Add an error to the report.

        Args:
            field: The field name with the error
            message: Error description
            value: The value that caused the error
            guidance: User-facing hint
        """
        self.issues.append(
            ValidationIssue(ValidationSeverity.ERROR, field, message, value, guidance)
        )

    def add_warning(
        self,
        field: str,
        message: str,
        value: Any = None,
        guidance: Optional[str] = None,
    ) -> None:
        """Add a warning to the report."""
        self.issues.append(
            ValidationIssue(ValidationSeverity.WARNING, field, message, value, guidance)
        )

    def get_errors(self) -> List[ValidationIssue]:
        """Get all error-level issues."""
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    def get_warnings(self) -> List[ValidationIssue]:
        """Get all warning-level issues."""
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    def merge(self, other: "ValidationReport") -> None:
        """Merge another validation report into this one."""
        self.issues.extend(other.issues)

    def error_message(self) -> str:
        """Join error messages into the result's ``error`` text."""
        return "; ".join(issue.message for issue in self.get_errors())

    def guidance_message(self) -> str:
        """Join error guidance into the result's user-facing ``message``.

        Falls back to the error message when an issue carries no guidance.
        """
        hints: List[str] = []
        for issue in self.get_errors():
            hint = issue.guidance or f"{issue.message}."
            if hint not in hints:
                hints.append(hint)
        return " ".join(hints)

    def summary(self) -> str:
        """Get a summary of the validation report."""
        parts = []
        if self.error_count > 0:
            parts.append(f"{self.error_count} error(s)")
        if self.warning_count > 0:
            parts.append(f"{self.warning_count} warning(s)")

        if not parts:
            return "No issues found"

        return ", ".join(parts)

    def format(self) -> str:
        """Format the validation report for display."""
        if not self.issues:
            return "Validation successful - no issues found"

        lines = [f"Validation Report - {self.summary()}", "=" * 60]
        for issue in sorted(self.issues, key=lambda i: -i.severity):
            lines.append(f"  - {issue}")
        return "\n".join(lines)
