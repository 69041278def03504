"""
Services used by the intent engine.

This package provides:
- The record-store interface and an in-memory/JSON-file implementation
- Entity resolution of informally named companies and deals
- Two-step composite operations with declared failure policies
- The execution error taxonomy and its classifier
"""

from .composite import CompositeOperation, CompositeOutcome, FailurePolicy
from .entity_resolver import EntityResolver
from .error_classifier import ErrorClassifier, ErrorKind
from .errors import (
    EngineError,
    NotFoundError,
    ResolutionMiss,
    SecondaryEffectError,
    StoreError,
    ValidationError,
)
from .record_store import EntityCollection, InMemoryRecordStore, RecordStore

__all__ = [
    "RecordStore",
    "EntityCollection",
    "InMemoryRecordStore",
    "EntityResolver",
    "CompositeOperation",
    "CompositeOutcome",
    "FailurePolicy",
    "ErrorClassifier",
    "ErrorKind",
    "EngineError",
    "ValidationError",
    "NotFoundError",
    "StoreError",
    "SecondaryEffectError",
    "ResolutionMiss",
]
