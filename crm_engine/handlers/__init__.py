"""Action handlers, one per action tag."""

from typing import Dict, Optional

from crm_engine.config.settings import EngineConfig
from crm_engine.handlers.base import ActionHandler
from crm_engine.handlers.companies import (
    CreateCompanyHandler,
    DeleteCompanyHandler,
    GetCompaniesHandler,
    UpdateCompanyHandler,
)
from crm_engine.handlers.contacts import (
    CreateContactHandler,
    DeleteContactHandler,
    GetContactsHandler,
    UpdateContactHandler,
)
from crm_engine.handlers.conversion import DealConverter
from crm_engine.handlers.deals import (
    CreateDealHandler,
    DeleteDealHandler,
    GetDealsHandler,
    UpdateDealHandler,
)
from crm_engine.handlers.help import HELP_TEXT, HelpHandler
from crm_engine.handlers.projects import (
    CreateProjectHandler,
    DeleteProjectHandler,
    GetProjectsHandler,
    UpdateProjectHandler,
)
from crm_engine.handlers.time_entries import (
    CreateTimeEntryHandler,
    DeleteTimeEntryHandler,
    GetTimeEntriesHandler,
    UpdateTimeEntryHandler,
)
from crm_engine.models.intent import ActionTag
from crm_engine.services.entity_resolver import EntityResolver
from crm_engine.services.error_classifier import ErrorClassifier
from crm_engine.services.record_store import RecordStore

HANDLER_CLASSES = (
    CreateCompanyHandler,
    CreateContactHandler,
    CreateDealHandler,
    CreateProjectHandler,
    CreateTimeEntryHandler,
    GetCompaniesHandler,
    GetContactsHandler,
    GetDealsHandler,
    GetProjectsHandler,
    GetTimeEntriesHandler,
    UpdateCompanyHandler,
    UpdateContactHandler,
    UpdateDealHandler,
    UpdateProjectHandler,
    UpdateTimeEntryHandler,
    DeleteCompanyHandler,
    DeleteContactHandler,
    DeleteDealHandler,
    DeleteProjectHandler,
    DeleteTimeEntryHandler,
    HelpHandler,
)


def build_handlers(
    store: RecordStore,
    config: Optional[EngineConfig] = None,
    classifier: Optional[ErrorClassifier] = None,
) -> Dict[ActionTag, ActionHandler]:
    """
    Instantiate every handler against one store.

    Args:
        store: Record store shared by all handlers
        config: Engine configuration
        classifier: Error classifier shared by all handlers

    Returns:
        Mapping of action tag to handler (``unknown`` has none)
    """
    resolver = EntityResolver(store)
    return {
        cls.action: cls(store, config, resolver, classifier) for cls in HANDLER_CLASSES
    }


__all__ = [
    "ActionHandler",
    "DealConverter",
    "HANDLER_CLASSES",
    "HELP_TEXT",
    "build_handlers",
]
