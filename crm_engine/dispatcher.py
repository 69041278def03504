"""
Intent dispatcher: the engine's single entry point.

The language-model collaborator is not guaranteed to emit valid action tags
or complete entity sets, so ``execute`` is a total function. Every intent,
whatever its shape, yields a well-formed ``ExecutionResult``; nothing is
ever raised to the caller.

Execution order for one intent:
1. Parse the intent (raw mappings are accepted)
2. Dispatch on the action tag (``unknown`` short-circuits)
3. Parse the entity map into the action's schema
4. Validate required fields (failures short-circuit before any store call)
5. Run the action's handler
"""

import logging
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from crm_engine.config.settings import EngineConfig, get_config
from crm_engine.handlers import ActionHandler, build_handlers
from crm_engine.handlers.conversion import (
    DealConverter,
    conversion_failure,
    conversion_result,
)
from crm_engine.models.entities import parse_entities
from crm_engine.models.intent import ActionTag, ExecutionResult, StructuredIntent
from crm_engine.services.error_classifier import ErrorClassifier
from crm_engine.services.errors import EngineError
from crm_engine.services.record_store import RecordStore
from crm_engine.utils.logging_utils import (
    LogContext,
    generate_correlation_id,
    sanitize_sensitive_data,
)
from crm_engine.validators.intent_validator import IntentValidator

logger = logging.getLogger(__name__)

UNKNOWN_ACTION_MESSAGE = (
    "I don't understand what you want me to do. "
    "Try asking me to create a company, contact, deal, or project."
)
GENERIC_FAILURE_MESSAGE = "Sorry, I encountered an error while processing your request."
INVALID_ENTITIES_MESSAGE = "Some of the details in your request have the wrong format."

IntentLike = Union[StructuredIntent, Mapping[str, Any]]


class IntentDispatcher:
    """
    Executes structured intents against a record store.

    Features:
    - Total dispatch over the action vocabulary
    - Entity parsing and required-field validation before any store call
    - Correlation-id log context per execution
    - Error classification statistics

    Example:
        >>> dispatcher = IntentDispatcher(InMemoryRecordStore())
        >>> result = await dispatcher.execute(
        ...     {"action": "create_company", "entities": {"companyName": "Acme"}}
        ... )
        >>> result.message
        'Created company "Acme"'
    """

    def __init__(
        self,
        store: RecordStore,
        config: Optional[EngineConfig] = None,
        handlers: Optional[Dict[ActionTag, ActionHandler]] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            store: Record store collaborator
            config: Engine configuration (defaults to the global config)
            handlers: Handler overrides keyed by action tag
        """
        self.store = store
        self.config = config or get_config()
        self.classifier = ErrorClassifier()
        self.handlers = build_handlers(store, self.config, self.classifier)
        if handlers:
            self.handlers.update(handlers)
        self.validator = IntentValidator()
        self.converter = DealConverter(store, self.config)

    async def execute(self, intent: IntentLike) -> ExecutionResult:
        """
        Execute one intent.

        Never raises: every fault becomes a failed result.

        Args:
            intent: StructuredIntent or its raw mapping form

        Returns:
            ExecutionResult
        """
        try:
            parsed = self._parse_intent(intent)
        except (TypeError, ValueError) as e:
            self.classifier.classify(e)
            logger.warning(f"Rejected malformed intent: {e}")
            return ExecutionResult.fail(f"Invalid intent: {e}", INVALID_ENTITIES_MESSAGE)

        with LogContext(correlation_id=generate_correlation_id(), action=parsed.action.value):
            logger.info(
                f"Executing {parsed.action.value} (confidence: {parsed.confidence:.2f})"
            )
            try:
                result = await self._dispatch(parsed)
            except Exception as e:
                self.classifier.classify(e)
                logger.error(
                    f"Unhandled error in {parsed.action.value}: "
                    f"{self.classifier.get_error_description(e)}",
                    exc_info=True,
                )
                logger.debug(f"Error statistics: {self.classifier.get_statistics()}")
                return ExecutionResult.fail(
                    str(e) or type(e).__name__, GENERIC_FAILURE_MESSAGE
                )

            if result.success:
                logger.info(f"{parsed.action.value} succeeded: {result.message}")
            else:
                logger.info(f"{parsed.action.value} failed: {result.error}")
            for warning in result.warnings:
                logger.warning(f"{parsed.action.value}: {warning}")
            return result

    async def convert_deal(
        self, deal_id: str, overrides: Optional[Mapping[str, Any]] = None
    ) -> ExecutionResult:
        """
        Convert a deal into a project outside the intent vocabulary.

        Args:
            deal_id: Deal to convert
            overrides: Project field overrides

        Returns:
            ExecutionResult with the project and the updated deal
        """
        with LogContext(correlation_id=generate_correlation_id(), action="convert_deal"):
            try:
                project, deal = await self.converter.convert_deal_to_project(
                    deal_id, overrides
                )
            except EngineError as e:
                self.classifier.classify(e)
                level = (
                    logging.INFO
                    if self.classifier.is_caller_correctable(e)
                    else logging.WARNING
                )
                logger.log(level, f"Deal conversion failed: {e.message}")
                return conversion_failure(e)
            except Exception as e:
                self.classifier.classify(e)
                logger.error(f"Deal conversion failed: {e}", exc_info=True)
                return ExecutionResult.fail(
                    str(e) or type(e).__name__, GENERIC_FAILURE_MESSAGE
                )
            return conversion_result(project, deal)

    def _parse_intent(self, intent: IntentLike) -> StructuredIntent:
        if isinstance(intent, StructuredIntent):
            return intent
        return StructuredIntent.model_validate(dict(intent))

    async def _dispatch(self, intent: StructuredIntent) -> ExecutionResult:
        handler = self.handlers.get(intent.action)
        if intent.action is ActionTag.UNKNOWN or handler is None:
            return ExecutionResult.fail(
                f"Unknown action: {intent.action.value}", UNKNOWN_ACTION_MESSAGE
            )

        logger.debug(f"Entities: {sanitize_sensitive_data(intent.entities)}")
        try:
            entities = parse_entities(intent.action, intent.entities)
        except PydanticValidationError as e:
            self.classifier.classify(e)
            fields = ", ".join(
                ".".join(str(part) for part in error["loc"]) for error in e.errors()
            )
            return ExecutionResult.fail(
                f"Invalid entity values: {fields}", INVALID_ENTITIES_MESSAGE
            )

        report = self.validator.validate(intent.action, entities)
        for issue in report.get_warnings():
            logger.warning(f"Entity warning: {issue}")
        if not report.is_valid():
            logger.info(f"Validation failed: {report.summary()}")
            return ExecutionResult.fail(report.error_message(), report.guidance_message())

        return await handler.handle(entities)
