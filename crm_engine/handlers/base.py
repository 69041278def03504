"""
Base classes for action handlers.

An action handler executes one action tag against the record store. The
shared ``handle`` entry point turns engine errors into failed results with
a handler-specific guidance prefix; anything else propagates to the
dispatcher, which answers with the generic apology.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from crm_engine.config.settings import EngineConfig, get_config
from crm_engine.models.entities import EntityPayload
from crm_engine.models.intent import ActionTag, EntityType, ExecutionResult
from crm_engine.services.entity_resolver import EntityResolver
from crm_engine.services.error_classifier import ErrorClassifier
from crm_engine.services.errors import (
    EngineError,
    NotFoundError,
    ResolutionMiss,
    StoreError,
    ValidationError,
)
from crm_engine.services.record_store import EntityCollection, RecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def compact(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Drop absent values so record defaults apply."""
    return {key: value for key, value in fields.items() if value is not None}


class ActionHandler(ABC):
    """
    Executes one action tag.

    Subclasses set ``action`` and implement ``execute``. Store calls go
    through ``call_store`` so collaborator failures surface as
    ``StoreError``.

    Attributes:
        action: Action tag handled
        store: Record store
        config: Engine configuration (record defaults)
        resolver: Resolver for informal company and deal references
        classifier: Error classifier counting resolution misses
    """

    action: ActionTag

    def __init__(
        self,
        store: RecordStore,
        config: Optional[EngineConfig] = None,
        resolver: Optional[EntityResolver] = None,
        classifier: Optional[ErrorClassifier] = None,
    ):
        self.store = store
        self.config = config or get_config()
        self.resolver = resolver or EntityResolver(store)
        self.classifier = classifier or ErrorClassifier()

    @property
    def entity_type(self) -> EntityType:
        return self.action.entity_type

    @property
    def collection(self) -> EntityCollection:
        return self.store.collection(self.entity_type)

    async def handle(self, entities: EntityPayload) -> ExecutionResult:
        """
        Execute the action and convert engine errors into failed results.

        Args:
            entities: Validated entity payload

        Returns:
            ExecutionResult
        """
        try:
            return await self.execute(entities)
        except (ValidationError, NotFoundError) as e:
            logger.info(f"{self.action.value} rejected: {e.message}")
            return ExecutionResult.fail(e.message, e.guidance or f"{e.message}.")
        except EngineError as e:
            logger.warning(f"{self.action.value} failed: {e.message}")
            return ExecutionResult.fail(e.message, self.failure_message(entities, e))

    @abstractmethod
    async def execute(self, entities: EntityPayload) -> ExecutionResult:
        """Run the action; may raise ``EngineError`` subclasses."""

    def failure_prefix(self, entities: EntityPayload) -> str:
        return f"Failed to {self.action.verb} {self.entity_type.label}."

    def failure_message(self, entities: EntityPayload, error: EngineError) -> str:
        """User-facing text for a store or secondary-effect failure."""
        return f"{self.failure_prefix(entities)} {error.message}"

    async def call_store(self, awaitable: Awaitable[T]) -> T:
        """
        Await a record-store call, wrapping collaborator failures.

        Raises:
            StoreError: If the store raised anything but an EngineError
        """
        try:
            return await awaitable
        except EngineError:
            raise
        except Exception as e:
            raise StoreError(str(e), cause=e) from e

    async def resolve_company_id(self, entities: EntityPayload) -> Optional[str]:
        """
        Resolve the company an intent refers to, leniently.

        An explicit ``companyId`` wins. Otherwise ``companyName`` is resolved
        by first substring match; a miss or a failing lookup leaves the
        record without a company.

        Args:
            entities: Payload with ``company_id`` / ``company_name``

        Returns:
            Company id or None
        """
        company_id = getattr(entities, "company_id", None)
        if company_id:
            return company_id
        company_name = getattr(entities, "company_name", None)
        if not company_name:
            return None

        try:
            company_id = await self.resolver.resolve_company(company_name)
        except StoreError as e:
            logger.warning(f"Company lookup failed, continuing without company: {e.message}")
            return None
        if company_id is None:
            miss = ResolutionMiss(f"No company matches '{company_name}'")
            self.classifier.classify(miss)
            logger.info(f"{miss.message}; continuing without company")
        return company_id


class GetHandler(ActionHandler):
    """
    Lists one record type and filters it in the engine.

    Subclasses implement ``matches``; ``prepare`` may resolve references
    once per call before filtering.
    """

    plural: str

    async def execute(self, entities: EntityPayload) -> ExecutionResult:
        records = await self.call_store(self.collection.list())
        context = await self.prepare(entities)
        selected = [
            r
            for r in records
            if _company_matches(r, context) and self.matches(r, entities, context)
        ]
        return ExecutionResult.ok(
            data=selected, message=f"Found {len(selected)} {self.plural}"
        )

    async def prepare(self, entities: EntityPayload) -> Dict[str, Any]:
        """
        Resolve the company filter once per call.

        A ``companyName`` that matches no company filters everything out.
        """
        company_id = getattr(entities, "company_id", None)
        company_name = getattr(entities, "company_name", None)
        if company_id:
            return {"filter_company": True, "company_id": company_id}
        if company_name:
            company_id = await self.resolver.resolve_company(company_name)
            return {"filter_company": True, "company_id": company_id}
        return {"filter_company": False}

    @abstractmethod
    def matches(self, record: Any, entities: EntityPayload, context: Dict[str, Any]) -> bool:
        """Whether a record passes the intent's filters."""

    def failure_message(self, entities: EntityPayload, error: EngineError) -> str:
        return f"Failed to retrieve {self.plural}."


class TargetedHandler(ActionHandler):
    """
    Acts on one existing record.

    Subclasses implement ``target_id``; ``describe`` names the record in
    messages.
    """

    @abstractmethod
    async def target_id(self, entities: EntityPayload) -> str:
        """Id of the target record; raises NotFoundError if unresolvable."""

    async def resolve_target(
        self,
        record_id: Optional[str],
        fragment: Optional[str] = None,
        resolve: Optional[Callable[[str], Awaitable[Optional[str]]]] = None,
    ) -> str:
        """
        Resolve the target from an explicit id or, failing that, a fragment.

        Unlike company references on creates, a fragment that matches
        nothing is an error here.

        Raises:
            NotFoundError: If nothing identifies a record
        """
        if record_id:
            return record_id
        if fragment and resolve is not None:
            resolved = await resolve(fragment)
            if resolved is not None:
                return resolved
        raise self.not_found(fragment or "(no reference)")

    def describe(self, record: Any) -> str:
        return record.id

    def not_found(self, reference: str) -> NotFoundError:
        label = self.entity_type.label
        return NotFoundError(
            f"{label.capitalize()} not found: {reference}",
            guidance=f"I couldn't find that {label}. Please check the name or id.",
        )


class UpdateHandler(TargetedHandler):
    """Applies a partial update to one record."""

    async def execute(self, entities: EntityPayload) -> ExecutionResult:
        record_id = await self.target_id(entities)
        changes = await self.changes(entities, record_id)
        if not changes:
            raise ValidationError(
                f"No {self.entity_type.label} fields to update",
                guidance=f"Please tell me what to change on the {self.entity_type.label}.",
            )
        record = await self.call_store(self.collection.update(record_id, changes))
        if record is None:
            raise self.not_found(record_id)
        logger.info(f"Updated {self.entity_type.label} {record_id}: {sorted(changes)}")
        return ExecutionResult.ok(
            data=record,
            message=f"Updated {self.entity_type.label} \"{self.describe(record)}\"",
        )

    @abstractmethod
    async def changes(self, entities: EntityPayload, record_id: str) -> Dict[str, Any]:
        """Record fields to change."""


class DeleteHandler(TargetedHandler):
    """Deletes one record."""

    async def execute(self, entities: EntityPayload) -> ExecutionResult:
        record_id = await self.target_id(entities)
        deleted = await self.call_store(self.collection.delete(record_id))
        if not deleted:
            raise self.not_found(record_id)
        logger.info(f"Deleted {self.entity_type.label} {record_id}")
        return ExecutionResult.ok(
            data={"id": record_id}, message=f"Deleted {self.entity_type.label}"
        )


def _company_matches(record: Any, context: Dict[str, Any]) -> bool:
    if not context.get("filter_company"):
        return True
    company_id = context.get("company_id")
    return company_id is not None and record.company_id == company_id
