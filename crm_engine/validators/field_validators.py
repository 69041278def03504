"""Field-level validators for intent entities.

This module provides validators for individual entity values: required
text, numbers and ranges, and closed choice lists. Optional values are only
checked when present; requiredness is decided by the caller.
"""

from decimal import Decimal
from typing import Iterable, Optional, Union

from crm_engine.validators.validation_report import ValidationReport

Number = Union[int, float, Decimal]


def normalize_choice(value: Optional[str]) -> Optional[str]:
    """Normalize a free-text choice such as ``"Closed Won"`` to ``"closed-won"``.

    Args:
        value: Raw value from the entity map

    Returns:
        Lower-case, hyphenated value, or None
    """
    if value is None:
        return None
    return "-".join(value.strip().lower().replace("_", " ").split())


class FieldValidators:
    """Collection of field-level validation methods.

    Every method records issues on the given ``ValidationReport`` instead
    of raising. ``as_warning`` downgrades a failure to a warning, used for
    fields that only feed best-effort side effects.
    """

    @staticmethod
    def validate_required_text(
        value: Optional[str],
        field_name: str,
        report: ValidationReport,
        message: Optional[str] = None,
        guidance: Optional[str] = None,
    ) -> None:
        """Validate that a text value is present and not whitespace.

        Args:
            value: The string value to validate
            field_name: Name of the field being validated
            report: ValidationReport to collect issues
            message: Error message (default: "<field> is required")
            guidance: User-facing hint
        """
        if value is None or not str(value).strip():
            report.add_error(
                field_name, message or f"{field_name} is required", value, guidance
            )

    @staticmethod
    def validate_any_present(
        values: dict,
        report: ValidationReport,
        message: str,
        guidance: Optional[str] = None,
    ) -> None:
        """Validate that at least one of several values is present.

        Args:
            values: Mapping of field name to value
            report: ValidationReport to collect issues
            message: Error message
            guidance: User-facing hint
        """
        if not any(_present(v) for v in values.values()):
            report.add_error(" / ".join(values), message, None, guidance)

    @staticmethod
    def validate_non_negative_number(
        value: Optional[Number],
        field_name: str,
        report: ValidationReport,
        as_warning: bool = False,
    ) -> None:
        """Validate that a number, when present, is non-negative (>= 0)."""
        if value is None:
            return
        if value < 0:
            _add(report, as_warning, field_name, "Value cannot be negative", value)

    @staticmethod
    def validate_positive_number(
        value: Optional[Number],
        field_name: str,
        report: ValidationReport,
    ) -> None:
        """Validate that a number, when present, is positive (> 0)."""
        if value is None:
            return
        if value <= 0:
            report.add_error(
                field_name, "Value must be positive (greater than 0)", value
            )

    @staticmethod
    def validate_number_range(
        value: Optional[Number],
        field_name: str,
        report: ValidationReport,
        min_val: Optional[Number] = None,
        max_val: Optional[Number] = None,
        as_warning: bool = False,
    ) -> None:
        """Validate that a number, when present, is within a range (inclusive)."""
        if value is None:
            return

        if min_val is not None and value < min_val:
            _add(report, as_warning, field_name, f"Value must be at least {min_val}", value)

        if max_val is not None and value > max_val:
            _add(report, as_warning, field_name, f"Value must be at most {max_val}", value)

    @staticmethod
    def validate_choice(
        value: Optional[str],
        field_name: str,
        report: ValidationReport,
        choices: Iterable[str],
        as_warning: bool = False,
    ) -> None:
        """Validate that a value, when present, is one of ``choices``.

        The value is normalized first, so ``"Closed Won"`` passes for
        ``"closed-won"``.
        """
        if value is None:
            return
        allowed = tuple(choices)
        if normalize_choice(value) not in allowed:
            _add(
                report,
                as_warning,
                field_name,
                f"Value must be one of: {', '.join(allowed)}",
                value,
            )


def _present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return bool(value)


def _add(report: ValidationReport, as_warning: bool, field_name: str, message: str, value) -> None:
    if as_warning:
        report.add_warning(field_name, message, value)
    else:
        report.add_error(field_name, message, value)
