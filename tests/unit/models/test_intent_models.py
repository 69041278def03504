"""Unit tests for intent and result models."""

import pytest
from pydantic import ValidationError

from crm_engine.models.intent import ActionTag, EntityType, ExecutionResult, StructuredIntent


class TestActionTag:
    """Test the closed action vocabulary."""

    def test_known_tag(self):
        """Test that a known tag resolves to its member."""
        assert ActionTag("create_company") is ActionTag.CREATE_COMPANY

    @pytest.mark.parametrize("raw", ["launch_rocket", "", "create_invoice"])
    def test_unknown_tag_maps_to_unknown(self, raw):
        """Test that tags outside the vocabulary never raise."""
        assert ActionTag(raw) is ActionTag.UNKNOWN

    def test_non_string_maps_to_unknown(self):
        """Test that non-string tags become unknown."""
        assert ActionTag(42) is ActionTag.UNKNOWN

    @pytest.mark.parametrize("raw", ["Create_Company", " create-company ", "create company"])
    def test_tags_are_normalized(self, raw):
        """Test that case, hyphens and spaces are tolerated."""
        assert ActionTag(raw) is ActionTag.CREATE_COMPANY

    @pytest.mark.parametrize(
        "action,verb,entity_type",
        [
            (ActionTag.CREATE_CONTACT, "create", EntityType.CONTACT),
            (ActionTag.GET_COMPANIES, "get", EntityType.COMPANY),
            (ActionTag.UPDATE_DEAL, "update", EntityType.DEAL),
            (ActionTag.DELETE_PROJECT, "delete", EntityType.PROJECT),
            (ActionTag.GET_TIME_ENTRIES, "get", EntityType.TIME_ENTRY),
            (ActionTag.CREATE_TIME_ENTRY, "create", EntityType.TIME_ENTRY),
        ],
    )
    def test_verb_and_entity_type(self, action, verb, entity_type):
        """Test that tags split into a verb and a record type."""
        assert action.verb == verb
        assert action.entity_type is entity_type

    @pytest.mark.parametrize("action", [ActionTag.HELP, ActionTag.UNKNOWN])
    def test_help_and_unknown_have_no_target(self, action):
        """Test that help and unknown target no record type."""
        assert action.verb is None
        assert action.entity_type is None

    def test_entity_type_label(self):
        """Test that labels read naturally in messages."""
        assert EntityType.TIME_ENTRY.label == "time entry"


class TestStructuredIntent:
    """Test the intent payload."""

    def test_parses_upstream_payload(self):
        """Test that an upstream payload validates with its camelCase text key."""
        intent = StructuredIntent.model_validate(
            {
                "action": "create_deal",
                "entities": {"dealTitle": "Website"},
                "confidence": 0.9,
                "originalText": "Add a website deal",
            }
        )

        assert intent.action is ActionTag.CREATE_DEAL
        assert intent.entities == {"dealTitle": "Website"}
        assert intent.original_text == "Add a website deal"

    def test_unknown_action_and_null_entities(self):
        """Test that odd tags and null entity maps are tolerated."""
        intent = StructuredIntent.model_validate({"action": "dance", "entities": None})

        assert intent.action is ActionTag.UNKNOWN
        assert intent.entities == {}

    def test_confidence_range(self):
        """Test that confidence must lie in [0, 1]."""
        with pytest.raises(ValidationError):
            StructuredIntent(action="help", confidence=1.5)

    def test_intent_is_immutable(self):
        """Test that a received intent cannot be changed."""
        intent = StructuredIntent(action="help")

        with pytest.raises(ValidationError):
            intent.action = ActionTag.UNKNOWN


class TestExecutionResult:
    """Test the result contract."""

    def test_ok(self):
        """Test that ok builds a successful result."""
        result = ExecutionResult.ok(data={"id": "1"}, message="Created", warnings=["w"])

        assert result.success is True
        assert result.error is None
        assert result.warnings == ["w"]

    def test_fail(self):
        """Test that fail builds a failed result with an error."""
        result = ExecutionResult.fail("Company name is required", "Please provide one.")

        assert result.success is False
        assert result.error == "Company name is required"
        assert result.message == "Please provide one."
        assert result.warnings == []

    def test_fail_with_blank_error_gets_default(self):
        """Test that a failure never lacks an error description."""
        assert ExecutionResult.fail("").error == "Unknown error occurred"

    def test_failure_without_error_is_rejected(self):
        """Test that a failed result must carry an error."""
        with pytest.raises(ValidationError, match="must carry an error"):
            ExecutionResult(success=False)

    def test_success_without_payload_is_rejected(self):
        """Test that a successful result must carry data or a message."""
        with pytest.raises(ValidationError, match="data or a message"):
            ExecutionResult(success=True)

    def test_success_with_only_message(self):
        """Test that a message alone satisfies a successful result."""
        assert ExecutionResult.ok(message="Deleted deal").data is None
