"""Contact handlers."""

import logging
from typing import Any, Dict

from crm_engine.handlers.base import (
    ActionHandler,
    DeleteHandler,
    GetHandler,
    UpdateHandler,
    compact,
)
from crm_engine.handlers.filters import text_matches
from crm_engine.models.entities import (
    CreateContactEntities,
    DeleteContactEntities,
    GetContactsEntities,
    UpdateContactEntities,
)
from crm_engine.models.intent import ActionTag, ExecutionResult
from crm_engine.models.records import Contact
from crm_engine.validators.field_validators import normalize_choice

logger = logging.getLogger(__name__)


def contact_fields(entities: CreateContactEntities) -> Dict[str, Any]:
    """Map contact entities onto Contact record fields."""
    return compact(
        {
            "first_name": entities.contact_first_name,
            "last_name": entities.contact_last_name,
            "email": entities.contact_email,
            "phone": entities.contact_phone,
            "position": entities.contact_position,
            "department": entities.contact_department,
            "is_primary": entities.is_primary,
            "notes": entities.notes,
            "tags": entities.tags,
        }
    )


class CreateContactHandler(ActionHandler):
    action = ActionTag.CREATE_CONTACT

    async def execute(self, entities: CreateContactEntities) -> ExecutionResult:
        company_id = await self.resolve_company_id(entities)
        fields = contact_fields(entities)
        fields["company_id"] = company_id

        contact = await self.call_store(self.store.contacts.create(fields))
        logger.info(f"Created contact {contact.id} (company: {company_id})")

        suffix = " for company" if company_id else ""
        return ExecutionResult.ok(
            data=contact, message=f"Created contact \"{contact.full_name}\"{suffix}"
        )

    def failure_prefix(self, entities: CreateContactEntities) -> str:
        return (
            f"Failed to create contact "
            f"\"{entities.contact_first_name} {entities.contact_last_name}\"."
        )


class GetContactsHandler(GetHandler):
    """Lists contacts, optionally for one company."""

    action = ActionTag.GET_CONTACTS
    plural = "contacts"

    def matches(self, contact: Contact, entities: GetContactsEntities, context) -> bool:
        return text_matches(
            entities.search_term, contact.first_name, contact.last_name, contact.email
        )


class UpdateContactHandler(UpdateHandler):
    action = ActionTag.UPDATE_CONTACT

    async def target_id(self, entities: UpdateContactEntities) -> str:
        return await self.resolve_target(entities.contact_id)

    async def changes(
        self, entities: UpdateContactEntities, record_id: str
    ) -> Dict[str, Any]:
        changes = contact_fields(entities)
        if entities.company_id or entities.company_name:
            company_id = await self.resolve_company_id(entities)
            if company_id:
                changes["company_id"] = company_id
        status = normalize_choice(entities.status)
        if status:
            changes["status"] = status
        return changes

    def describe(self, contact: Contact) -> str:
        return contact.full_name


class DeleteContactHandler(DeleteHandler):
    action = ActionTag.DELETE_CONTACT

    async def target_id(self, entities: DeleteContactEntities) -> str:
        return await self.resolve_target(entities.contact_id)
