"""
Unit tests for deal handlers.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from crm_engine.handlers.deals import (
    CreateDealHandler,
    DeleteDealHandler,
    GetDealsHandler,
    UpdateDealHandler,
)


class TestCreateDealHandler:
    """Test cases for create_deal."""

    def test_defaults(self, store, handle):
        """Test that an untitled deal gets a title, stage and probability."""
        result = handle(CreateDealHandler, store, {"dealValue": 1000})

        assert result.success
        deal = result.data
        assert deal.title == "Deal - 1000 USD"
        assert deal.stage == "prospecting"
        assert deal.probability == 25
        assert result.message == 'Created deal "Deal - 1000 USD" worth USD 1000'

    def test_zero_probability_is_kept(self, store, handle):
        """Test that an explicit zero probability is not replaced by the default."""
        result = handle(CreateDealHandler, store, {"dealTitle": "Long shot", "dealProbability": 0})

        assert result.data.probability == 0
        assert result.data.value == Decimal("0")

    def test_company_attached(self, seeded_store, run, handle):
        """Test that the deal is attached to the resolved company."""
        acme = run(seeded_store.companies.list())[1]

        result = handle(
            CreateDealHandler,
            seeded_store,
            {"dealTitle": "Robots", "companyName": "acme", "dealStage": "Proposal", "dealCurrency": "EUR"},
        )

        assert result.data.company_id == acme.id
        assert result.data.stage == "proposal"
        assert result.data.currency == "EUR"


class TestGetDealsHandler:
    """Test cases for get_deals."""

    @pytest.fixture
    def deals_store(self, seeded_store, run):
        """Seeded store plus a small closed deal."""
        run(seeded_store.deals.create({"title": "Support", "value": 5000, "stage": "closed-won", "probability": 100}))
        return seeded_store

    @pytest.mark.parametrize(
        "entities,titles",
        [
            ({}, ["Website Redesign", "Support"]),
            ({"minValue": 10000}, ["Website Redesign"]),
            ({"maxValue": 5000}, ["Support"]),
            ({"minProbability": 70}, ["Support"]),
            ({"stage": "closed"}, ["Support"]),
            ({"searchTerm": "website"}, ["Website Redesign"]),
            ({"companyName": "TechCorp"}, ["Website Redesign"]),
        ],
    )
    def test_filters(self, deals_store, handle, entities, titles):
        """Test value, probability, stage, text and company filters."""
        result = handle(GetDealsHandler, deals_store, entities)

        assert [d.title for d in result.data] == titles
        assert result.message == f"Found {len(titles)} deals"


class TestUpdateDealHandler:
    """Test cases for update_deal."""

    def test_update_by_title(self, seeded_store, handle):
        """Test that a title fragment targets the deal without renaming it."""
        result = handle(
            UpdateDealHandler, seeded_store, {"dealTitle": "website", "dealStage": "Proposal", "dealValue": 60000}
        )

        assert result.success
        assert result.data.title == "Website Redesign"
        assert result.data.stage == "proposal"
        assert result.data.value == Decimal("60000")
        assert result.message == 'Updated deal "Website Redesign"'

    def test_rename_by_id(self, seeded_store, run, handle):
        """Test that dealTitle renames the deal when dealId is given."""
        deal = run(seeded_store.deals.list())[0]

        result = handle(UpdateDealHandler, seeded_store, {"dealId": deal.id, "dealTitle": "Web Platform"})

        assert result.data.title == "Web Platform"

    def test_unknown_title(self, seeded_store, handle):
        """Test that an unmatched title is not found."""
        result = handle(UpdateDealHandler, seeded_store, {"dealTitle": "Mobile", "dealStage": "proposal"})

        assert not result.success
        assert result.error == "Deal not found: Mobile"

    def test_convert_to_project(self, seeded_store, run, handle):
        """Test that convertToProject closes the deal and creates a project."""
        result = handle(
            UpdateDealHandler,
            seeded_store,
            {"dealTitle": "website", "convertToProject": True, "projectTitle": "Website build"},
        )

        assert result.success
        assert result.message == 'Converted deal "Website Redesign" into project "Website build"'
        projects = run(seeded_store.projects.list())
        assert [p.title for p in projects] == ["Website build"]
        assert result.data["deal"].stage == "closed-won"
        assert result.data["deal"].project_id == projects[0].id

    def test_convert_saves_changes_with_closing_update(self, seeded_store, run, handle):
        """Test that field changes reach the project and the won deal."""
        deal = run(seeded_store.deals.list())[0]

        result = handle(
            UpdateDealHandler,
            seeded_store,
            {"dealId": deal.id, "dealValue": 80000, "convertToProject": True},
        )

        stored = run(seeded_store.deals.get(deal.id))
        assert result.data["project"].budget.total_revenue == Decimal("80000")
        assert stored.value == Decimal("80000")
        assert stored.stage == "closed-won"

    def test_failed_conversion_saves_no_changes(self, seeded_store, run, handle):
        """Test that a failing project create leaves the deal's fields as they were."""
        deal = run(seeded_store.deals.list())[0]
        seeded_store.projects.create = AsyncMock(side_effect=RuntimeError("projects offline"))

        result = handle(
            UpdateDealHandler,
            seeded_store,
            {"dealId": deal.id, "dealValue": 80000, "dealStage": "proposal", "convertToProject": True},
        )

        stored = run(seeded_store.deals.get(deal.id))
        assert not result.success
        assert result.message == "Failed to convert deal to project. projects offline"
        assert stored.value == Decimal("50000")
        assert stored.stage == "negotiation"

    def test_convert_twice_is_rejected(self, seeded_store, handle):
        """Test that a converted deal cannot be converted again."""
        handle(UpdateDealHandler, seeded_store, {"dealTitle": "website", "convertToProject": True})

        result = handle(UpdateDealHandler, seeded_store, {"dealTitle": "website", "convertToProject": True})

        assert not result.success
        assert result.error.startswith("Deal already converted to project")


class TestDeleteDealHandler:
    """Test cases for delete_deal."""

    def test_delete_by_title(self, seeded_store, run, handle):
        """Test that a deal is deleted by title fragment."""
        result = handle(DeleteDealHandler, seeded_store, {"dealTitle": "redesign"})

        assert result.success
        assert run(seeded_store.deals.list()) == []

    def test_delete_missing(self, seeded_store, handle):
        """Test that deleting an unknown deal is not found."""
        result = handle(DeleteDealHandler, seeded_store, {"dealId": "nope"})

        assert result.error == "Deal not found: nope"
        assert result.message == "I couldn't find that deal. Please check the name or id."
