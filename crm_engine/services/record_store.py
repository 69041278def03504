"""
Record store interface and an in-memory implementation with JSON-file
persistence.

The engine only needs a capability set per record type: list, get, create,
update and delete. ``RecordStore`` groups one ``EntityCollection`` per
record type; any backend (SQL, hosted database, HTTP API) can implement it.
``InMemoryRecordStore`` is the implementation used by the CLI and tests.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from collections import OrderedDict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar, Union

from crm_engine.models.base import RecordModel, utc_now
from crm_engine.models.intent import EntityType
from crm_engine.models.records import Company, Contact, Deal, Project, TimeEntry

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=RecordModel)

RECORD_MODELS: Dict[EntityType, Type[RecordModel]] = {
    EntityType.COMPANY: Company,
    EntityType.CONTACT: Contact,
    EntityType.DEAL: Deal,
    EntityType.PROJECT: Project,
    EntityType.TIME_ENTRY: TimeEntry,
}


class EntityCollection(ABC, Generic[R]):
    """Async CRUD capability set for one record type."""

    @abstractmethod
    async def list(self) -> List[R]:
        """Return the full collection in a stable order."""

    @abstractmethod
    async def get(self, record_id: str) -> Optional[R]:
        """Return one record, or None if absent."""

    @abstractmethod
    async def create(self, fields: Mapping[str, Any]) -> R:
        """Create a record from ``fields`` and return it."""

    @abstractmethod
    async def update(self, record_id: str, fields: Mapping[str, Any]) -> Optional[R]:
        """Apply a partial update; return the record, or None if absent."""

    @abstractmethod
    async def delete(self, record_id: str) -> bool:
        """Delete a record; return False if it did not exist."""


class RecordStore(ABC):
    """One collection per record type."""

    companies: EntityCollection[Company]
    contacts: EntityCollection[Contact]
    deals: EntityCollection[Deal]
    projects: EntityCollection[Project]
    time_entries: EntityCollection[TimeEntry]

    def collection(self, entity_type: Union[EntityType, str]) -> EntityCollection:
        """
        Get the collection for a record type.

        Args:
            entity_type: Record type (enum or its value, e.g. "deal")

        Returns:
            The matching collection
        """
        entity_type = EntityType(entity_type)
        return {
            EntityType.COMPANY: self.companies,
            EntityType.CONTACT: self.contacts,
            EntityType.DEAL: self.deals,
            EntityType.PROJECT: self.projects,
            EntityType.TIME_ENTRY: self.time_entries,
        }[entity_type]


class InMemoryCollection(EntityCollection[R]):
    """
    In-memory collection keeping records in insertion order.

    Records are validated through their pydantic model on create and
    update, so the store never holds an invalid record. Callers get copies;
    mutating a returned record does not change the store.
    """

    def __init__(self, model: Type[R]):
        self.model = model
        self._records: "OrderedDict[str, R]" = OrderedDict()

    async def list(self) -> List[R]:
        return [record.model_copy(deep=True) for record in self._records.values()]

    async def get(self, record_id: str) -> Optional[R]:
        record = self._records.get(record_id)
        return record.model_copy(deep=True) if record is not None else None

    async def create(self, fields: Mapping[str, Any]) -> R:
        record = self.model.model_validate(dict(fields))
        if record.id in self._records:
            raise ValueError(f"{self.model.__name__} with id '{record.id}' already exists")
        self._records[record.id] = record
        logger.debug(f"Created {self.model.__name__} {record.id}")
        return record.model_copy(deep=True)

    async def update(self, record_id: str, fields: Mapping[str, Any]) -> Optional[R]:
        current = self._records.get(record_id)
        if current is None:
            return None
        data = current.model_dump()
        data.update(dict(fields))
        data["id"] = record_id
        data["created_at"] = current.created_at
        data["updated_at"] = utc_now()
        record = self.model.model_validate(data)
        self._records[record_id] = record
        logger.debug(f"Updated {self.model.__name__} {record_id}")
        return record.model_copy(deep=True)

    async def delete(self, record_id: str) -> bool:
        if self._records.pop(record_id, None) is None:
            return False
        logger.debug(f"Deleted {self.model.__name__} {record_id}")
        return True

    def load_records(self, rows: List[Dict[str, Any]]) -> None:
        """Replace the collection's content with validated rows."""
        self._records.clear()
        for row in rows:
            record = self.model.model_validate(row)
            self._records[record.id] = record

    def dump_records(self) -> List[Dict[str, Any]]:
        """Serialize the collection to JSON-compatible rows."""
        return [record.model_dump(mode="json") for record in self._records.values()]

    def __len__(self) -> int:
        return len(self._records)


class InMemoryRecordStore(RecordStore):
    """
    Record store held in memory, optionally persisted to a JSON file.

    Features:
    - One insertion-ordered collection per record type
    - Pydantic validation of every stored record
    - Atomic JSON save (temp file + rename) and versioned load

    Example:
        >>> store = InMemoryRecordStore.load("crm.json")
        >>> company = await store.companies.create({"name": "Acme"})
        >>> store.save("crm.json")
    """

    FILE_VERSION = "1.0"

    def __init__(self):
        self.companies = InMemoryCollection(Company)
        self.contacts = InMemoryCollection(Contact)
        self.deals = InMemoryCollection(Deal)
        self.projects = InMemoryCollection(Project)
        self.time_entries = InMemoryCollection(TimeEntry)

    def _collections(self) -> Dict[EntityType, InMemoryCollection]:
        return {
            entity_type: self.collection(entity_type) for entity_type in EntityType
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the whole store."""
        return {
            "version": self.FILE_VERSION,
            "last_updated": datetime.now().isoformat(),
            "records": {
                entity_type.value: collection.dump_records()
                for entity_type, collection in self._collections().items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InMemoryRecordStore":
        """
        Build a store from serialized data.

        Raises:
            ValueError: If the data was written by an incompatible version
        """
        version = data.get("version", "unknown")
        if version != cls.FILE_VERSION:
            raise ValueError(
                f"Store file version mismatch (expected {cls.FILE_VERSION}, got {version})"
            )
        store = cls()
        records = data.get("records", {})
        for entity_type, collection in store._collections().items():
            collection.load_records(records.get(entity_type.value, []))
        return store

    @classmethod
    def load(cls, path: Union[str, Path]) -> "InMemoryRecordStore":
        """
        Load a store from a JSON file; a missing file yields an empty store.

        Args:
            path: JSON file path

        Returns:
            Loaded store
        """
        file_path = Path(path)
        if not file_path.exists():
            logger.debug(f"Store file not found, starting empty: {file_path}")
            return cls()

        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        store = cls.from_dict(data)
        logger.info(
            f"Loaded record store from {file_path} "
            f"({sum(len(c) for c in store._collections().values())} records)"
        )
        return store

    def save(self, path: Union[str, Path]) -> None:
        """
        Save the store to a JSON file using an atomic write.

        Args:
            path: JSON file path
        """
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        temp_fd, temp_path = tempfile.mkstemp(dir=file_path.parent, suffix=".tmp")
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
            os.replace(temp_path, file_path)
        except Exception:
            # Clean up temp file on error
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
        logger.debug(f"Saved record store to {file_path}")
