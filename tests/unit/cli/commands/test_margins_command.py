"""Unit tests for the margins command."""

import json
from decimal import Decimal

import pytest
from click.testing import CliRunner

from crm_engine.calculators.budget_calculator import compute_budget
from crm_engine.cli import cli
from crm_engine.cli.commands.margins import find_project
from crm_engine.cli.error_handlers import InputFileError
from crm_engine.models.budget import BudgetInputs, ProjectResource
from crm_engine.models.records import Project


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def project(store, run):
    """Project with revenue 1000 and a 500 resource budget, with 12 hours logged at 50."""
    budget = compute_budget(
        BudgetInputs(
            total_revenue=Decimal("1000"),
            resources=[ProjectResource(name="Developer", hourly_rate=Decimal("50"), hours_allocated=Decimal("10"))],
            contingency_percentage=Decimal("0"),
        )
    )
    project = run(store.projects.create({"title": "Portal", "budget": budget}))
    run(store.time_entries.create({"project_id": project.id, "duration": 720, "hourly_rate": Decimal("50")}))
    return project


@pytest.fixture
def store_file(tmp_path, store, project):
    """The store with the project saved to disk."""
    path = tmp_path / "store.json"
    store.save(path)
    return path


class TestMarginsCommand:
    """Test suite for the margins command."""

    def test_prints_margins(self, runner, store_file, project):
        """Test that the comparison table and a variance line are printed."""
        result = runner.invoke(cli, ["margins", project.id[:8], "--store-file", str(store_file)])

        assert result.exit_code == 0
        assert "Tracked hours" in result.output
        assert "12.00" in result.output
        assert "USD 600.00" in result.output
        assert "USD 400.00" in result.output
        assert "120.00%" in result.output
        assert "Portal: USD -100.00 below budgeted margin" in result.output

    def test_json_output(self, runner, store_file, project):
        """Test that --json prints the margins with camelCase keys."""
        result = runner.invoke(cli, ["margins", project.id, "--store-file", str(store_file), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert Decimal(payload["budgetedMargin"]) == Decimal("500")
        assert Decimal(payload["actualMargin"]) == Decimal("400")
        assert Decimal(payload["variance"]) == Decimal("-100")

    def test_unknown_project(self, runner, store_file):
        """Test that an unknown project id exits with 1 and a hint."""
        result = runner.invoke(cli, ["margins", "zzzz", "--store-file", str(store_file)])

        assert result.exit_code == 1
        assert "No project matches 'zzzz'" in result.output
        assert "list-records project" in result.output


class TestFindProject:
    """Test suite for project lookup by id."""

    def test_full_id_wins_over_prefix(self):
        """Test that an exact id is preferred to longer ids sharing it."""
        short = Project(id="ab", title="Short")
        longer = Project(id="abc", title="Longer")

        assert find_project([longer, short], "ab") is short

    def test_ambiguous_prefix(self):
        """Test that a prefix matching several projects is rejected."""
        projects = [Project(id="abc", title="One"), Project(id="abd", title="Two")]

        with pytest.raises(InputFileError, match="2 projects match 'ab'"):
            find_project(projects, "ab")
