"""
Unit tests for time entry handlers.
"""

import datetime as dt
from decimal import Decimal

import pytest

from crm_engine.handlers.time_entries import (
    CreateTimeEntryHandler,
    DeleteTimeEntryHandler,
    GetTimeEntriesHandler,
    UpdateTimeEntryHandler,
    hours_to_minutes,
)


class TestHoursToMinutes:
    """Test cases for hour conversion."""

    @pytest.mark.parametrize(
        "hours,minutes",
        [(Decimal("1"), 60), (Decimal("2.5"), 150), (Decimal("0.25"), 15), (Decimal("0.0125"), 1)],
    )
    def test_conversion(self, hours, minutes):
        """Test that hours become whole minutes, rounding half up."""
        assert hours_to_minutes(hours) == minutes


class TestCreateTimeEntryHandler:
    """Test cases for create_time_entry."""

    def test_defaults(self, store, handle):
        """Test that a description alone logs one billable hour today."""
        result = handle(CreateTimeEntryHandler, store, {"timeDescription": "website design"})

        entry = result.data
        assert result.message == "Logged 1 hours of work: website design"
        assert entry.duration == 60
        assert entry.billable is True
        assert entry.date == dt.date.today()
        assert entry.resource_name == "Default User"
        assert entry.currency == "USD"

    def test_hours_and_flags(self, store, handle):
        """Test that hours, billable flag and rate come from the intent."""
        result = handle(
            CreateTimeEntryHandler,
            store,
            {"timeHours": 2.5, "billable": False, "hourlyRate": 80, "timeDate": "2026-03-02"},
        )

        entry = result.data
        assert result.message == "Logged 2.5 hours of work"
        assert entry.duration == 150
        assert entry.billable is False
        assert entry.hourly_rate == Decimal("80")
        assert entry.date == dt.date(2026, 3, 2)


class TestGetTimeEntriesHandler:
    """Test cases for get_time_entries."""

    @pytest.fixture
    def entries_store(self, store, handle):
        handle(CreateTimeEntryHandler, store, {"timeDescription": "design", "projectId": "p-1"})
        handle(CreateTimeEntryHandler, store, {"timeDescription": "meeting", "billable": False})
        return store

    @pytest.mark.parametrize(
        "entities,descriptions",
        [
            ({}, ["design", "meeting"]),
            ({"projectId": "p-1"}, ["design"]),
            ({"billable": False}, ["meeting"]),
            ({"searchTerm": "default user"}, ["design", "meeting"]),
        ],
    )
    def test_filters(self, entries_store, handle, entities, descriptions):
        """Test project, billable and text filters."""
        result = handle(GetTimeEntriesHandler, entries_store, entities)

        assert [e.description for e in result.data] == descriptions
        assert result.message == f"Found {len(descriptions)} time entries"


class TestUpdateAndDeleteTimeEntry:
    """Test cases for update_time_entry and delete_time_entry."""

    def test_update_hours(self, store, handle):
        """Test that new hours are stored as minutes."""
        entry = handle(CreateTimeEntryHandler, store, {"timeDescription": "design"}).data

        result = handle(UpdateTimeEntryHandler, store, {"timeEntryId": entry.id, "timeHours": 3})

        assert result.data.duration == 180
        assert result.message == 'Updated time entry "design"'

    def test_delete_missing(self, store, handle):
        """Test that deleting an unknown entry is not found."""
        result = handle(DeleteTimeEntryHandler, store, {"timeEntryId": "nope"})

        assert result.error == "Time entry not found: nope"
        assert result.message == "I couldn't find that time entry. Please check the name or id."
