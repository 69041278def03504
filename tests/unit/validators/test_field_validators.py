"""Tests for field-level validators."""

from decimal import Decimal

import pytest

from crm_engine.validators.field_validators import FieldValidators, normalize_choice
from crm_engine.validators.validation_report import ValidationReport


class TestNormalizeChoice:
    """Tests for choice normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Closed Won", "closed-won"),
            ("closed_lost", "closed-lost"),
            ("  on  hold ", "on-hold"),
            ("planning", "planning"),
        ],
    )
    def test_normalize(self, raw, expected):
        """Test that free-text choices become lower-case hyphenated values."""
        assert normalize_choice(raw) == expected

    def test_none_passes_through(self):
        """Test that None stays None."""
        assert normalize_choice(None) is None


class TestRequiredText:
    """Tests for required text validation."""

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_text(self, value):
        """Test that missing or blank text is an error with guidance."""
        report = ValidationReport()

        FieldValidators.validate_required_text(
            value, "companyName", report, "Company name is required", "Please provide one."
        )

        assert report.error_count == 1
        assert report.issues[0].message == "Company name is required"
        assert report.issues[0].guidance == "Please provide one."

    def test_default_message(self):
        """Test that the message defaults to the field name."""
        report = ValidationReport()

        FieldValidators.validate_required_text(None, "dealTitle", report)

        assert report.error_message() == "dealTitle is required"

    def test_present_text(self):
        """Test that present text passes."""
        report = ValidationReport()

        FieldValidators.validate_required_text("TechCorp", "companyName", report)

        assert report.is_valid()


class TestAnyPresent:
    """Tests for one-of-several validation."""

    def test_none_present(self):
        """Test that an error is added when every value is absent."""
        report = ValidationReport()

        FieldValidators.validate_any_present(
            {"companyId": None, "companyName": " "}, report, "Company is required"
        )

        assert report.error_count == 1
        assert report.issues[0].field == "companyId / companyName"

    def test_one_present(self):
        """Test that a single present value is enough."""
        report = ValidationReport()

        FieldValidators.validate_any_present(
            {"companyId": None, "companyName": "TechCorp"}, report, "Company is required"
        )

        assert report.is_valid()


class TestNumberValidation:
    """Tests for numeric validation."""

    def test_negative_is_error(self):
        """Test that a negative amount is an error."""
        report = ValidationReport()

        FieldValidators.validate_non_negative_number(Decimal("-1"), "dealValue", report)

        assert report.error_count == 1
        assert "negative" in report.issues[0].message

    def test_negative_as_warning(self):
        """Test that as_warning downgrades the issue."""
        report = ValidationReport()

        FieldValidators.validate_non_negative_number(-5, "dealValue", report, as_warning=True)

        assert report.is_valid()
        assert report.warning_count == 1

    def test_zero_is_non_negative(self):
        """Test that zero passes the non-negative check."""
        report = ValidationReport()

        FieldValidators.validate_non_negative_number(0, "hourlyRate", report)

        assert report.is_valid()

    @pytest.mark.parametrize("value", [0, Decimal("-0.5")])
    def test_positive_rejects_zero_and_negative(self, value):
        """Test that positive numbers must exceed zero."""
        report = ValidationReport()

        FieldValidators.validate_positive_number(value, "timeHours", report)

        assert report.error_count == 1

    def test_absent_numbers_are_skipped(self):
        """Test that None is never checked."""
        report = ValidationReport()

        FieldValidators.validate_non_negative_number(None, "dealValue", report)
        FieldValidators.validate_positive_number(None, "timeHours", report)
        FieldValidators.validate_number_range(None, "probability", report, 0, 100)

        assert report.issues == []

    @pytest.mark.parametrize(
        "value,message",
        [(-1, "Value must be at least 0"), (101, "Value must be at most 100")],
    )
    def test_range_bounds(self, value, message):
        """Test that values outside the range are rejected."""
        report = ValidationReport()

        FieldValidators.validate_number_range(value, "probability", report, 0, 100)

        assert report.error_message() == message

    @pytest.mark.parametrize("value", [0, 50, 100])
    def test_range_is_inclusive(self, value):
        """Test that range bounds are inclusive."""
        report = ValidationReport()

        FieldValidators.validate_number_range(value, "progress", report, 0, 100)

        assert report.is_valid()


class TestChoiceValidation:
    """Tests for closed choice lists."""

    def test_normalized_choice_passes(self):
        """Test that choices are compared after normalization."""
        report = ValidationReport()

        FieldValidators.validate_choice(
            "Closed Won", "dealStage", report, ["prospecting", "closed-won"]
        )

        assert report.is_valid()

    def test_unknown_choice(self):
        """Test that an unknown choice lists the allowed values."""
        report = ValidationReport()

        FieldValidators.validate_choice("maybe", "dealStage", report, ("a", "b"))

        assert report.error_message() == "Value must be one of: a, b"

    def test_unknown_choice_as_warning(self):
        """Test that as_warning records a warning."""
        report = ValidationReport()

        FieldValidators.validate_choice("maybe", "dealStage", report, ("a",), as_warning=True)

        assert report.warning_count == 1
        assert report.is_valid()
