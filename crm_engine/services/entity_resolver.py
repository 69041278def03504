"""
Resolution of informally named records to record identifiers.

Entity extraction from free text is approximate, so matching is a loose
case-insensitive substring test and the first match in store order wins.
When several records share the fragment the earlier one is picked; see
DESIGN.md for the trade-off.
"""

import logging
from typing import Callable, Iterable, Optional, TypeVar

from crm_engine.services.errors import StoreError
from crm_engine.services.record_store import RecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def first_match(
    records: Iterable[T], fragment: str, text_of: Callable[[T], str]
) -> Optional[T]:
    """
    Find the first record whose text contains ``fragment``, ignoring case.

    Args:
        records: Records in store order
        fragment: Name fragment to look for
        text_of: Extracts the text to match from a record

    Returns:
        First matching record, or None
    """
    needle = fragment.strip().lower()
    if not needle:
        return None
    for record in records:
        if needle in (text_of(record) or "").lower():
            return record
    return None


class EntityResolver:
    """
    Resolves company and deal references given by name.

    Stateless between calls: every resolution reads the current collection
    from the store.

    Example:
        >>> resolver = EntityResolver(store)
        >>> await resolver.resolve_company("tech")
        'c0f5...'
    """

    def __init__(self, store: RecordStore):
        """
        Initialize the resolver.

        Args:
            store: Record store to query
        """
        self.store = store

    async def resolve_company(self, name_fragment: Optional[str]) -> Optional[str]:
        """
        Resolve a company name fragment to a company id.

        Args:
            name_fragment: Partial company name

        Returns:
            Id of the first company whose name contains the fragment, or None

        Raises:
            StoreError: If listing companies fails
        """
        if not name_fragment or not name_fragment.strip():
            return None
        try:
            companies = await self.store.companies.list()
        except Exception as e:
            raise StoreError(f"Could not list companies: {e}", cause=e) from e

        company = first_match(companies, name_fragment, lambda c: c.name)
        if company is None:
            logger.debug(f"No company matches '{name_fragment}'")
            return None
        logger.debug(f"Resolved company '{name_fragment}' to {company.id}")
        return company.id

    async def resolve_deal(self, title_fragment: Optional[str]) -> Optional[str]:
        """
        Resolve a deal title fragment to a deal id.

        Args:
            title_fragment: Partial deal title

        Returns:
            Id of the first deal whose title contains the fragment, or None

        Raises:
            StoreError: If listing deals fails
        """
        if not title_fragment or not title_fragment.strip():
            return None
        try:
            deals = await self.store.deals.list()
        except Exception as e:
            raise StoreError(f"Could not list deals: {e}", cause=e) from e

        deal = first_match(deals, title_fragment, lambda d: d.title)
        if deal is None:
            logger.debug(f"No deal matches '{title_fragment}'")
            return None
        return deal.id
