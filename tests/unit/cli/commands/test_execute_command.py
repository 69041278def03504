"""Unit tests for the execute command."""

import json

import click
import pytest
from click.testing import CliRunner

from crm_engine.cli import cli
from crm_engine.cli.commands.execute import parse_entity_option
from crm_engine.services.record_store import InMemoryRecordStore


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


class TestParseEntityOption:
    """Test suite for key=value entity parsing."""

    @pytest.mark.parametrize(
        "option,expected",
        [
            ("companyName=TechCorp", ("companyName", "TechCorp")),
            ("dealValue=50000", ("dealValue", 50000)),
            ("billable=false", ("billable", False)),
            ('tags=["web","crm"]', ("tags", ["web", "crm"])),
            ("notes=a=b", ("notes", "a=b")),
            (" companyName =Acme", ("companyName", "Acme")),
        ],
    )
    def test_parses_values(self, option, expected):
        """Test that values are read as JSON where possible and as text otherwise."""
        assert parse_entity_option(option) == expected

    @pytest.mark.parametrize("option", ["companyName", "=Acme"])
    def test_rejects_malformed_option(self, option):
        """Test that options without a key and '=' are rejected."""
        with pytest.raises(click.BadParameter):
            parse_entity_option(option)


class TestExecuteCommand:
    """Test suite for the execute command."""

    def test_creates_company_and_saves_store(self, runner, tmp_path):
        """Test that a create intent is executed and the store file written."""
        store_file = tmp_path / "store.json"

        result = runner.invoke(
            cli,
            ["execute", "-a", "create_company", "-e", "companyName=TechCorp", "--store-file", str(store_file)],
        )

        assert result.exit_code == 0
        assert 'Created company "TechCorp"' in result.output
        assert f"Store saved to {store_file}" in result.output
        store = InMemoryRecordStore.load(store_file)
        assert len(store.companies) == 1

    def test_default_store_file(self, runner, tmp_path):
        """Test that the store lands in crm_store.json when no path is configured."""
        result = runner.invoke(cli, ["execute", "-a", "create_company", "-e", "companyName=Acme"])

        assert result.exit_code == 0
        assert (tmp_path / "crm_store.json").exists()

    def test_store_file_from_environment(self, runner, tmp_path, monkeypatch):
        """Test that CRM_STORE_FILE selects the store path."""
        store_file = tmp_path / "env_store.json"
        monkeypatch.setenv("CRM_STORE_FILE", str(store_file))

        result = runner.invoke(cli, ["execute", "-a", "create_company", "-e", "companyName=Acme"])

        assert result.exit_code == 0
        assert store_file.exists()

    def test_store_persists_between_runs(self, runner, tmp_path):
        """Test that a second run sees records written by the first."""
        store_file = str(tmp_path / "store.json")
        runner.invoke(cli, ["execute", "-a", "create_company", "-e", "companyName=TechCorp", "--store-file", store_file])

        result = runner.invoke(cli, ["execute", "-a", "get_companies", "--store-file", store_file])

        assert result.exit_code == 0
        assert "Found 1 companies" in result.output

    def test_intent_file(self, runner, tmp_path):
        """Test that a full intent can be read from a JSON file."""
        intent_file = tmp_path / "intent.json"
        intent_file.write_text(
            json.dumps({"action": "create_deal", "entities": {"dealTitle": "Audit", "dealValue": 1200}})
        )

        result = runner.invoke(cli, ["execute", "--intent-file", str(intent_file), "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["success"] is True
        assert payload["data"]["title"] == "Audit"

    def test_failed_result_exits_with_3(self, runner):
        """Test that an engine failure is reported with exit code 3."""
        result = runner.invoke(cli, ["execute", "-a", "create_contact", "-e", "contactFirstName=John"])

        assert result.exit_code == 3
        assert "Contact first and last name are required" in result.output
        assert "Please provide both first and last name for the contact." in result.output

    def test_unknown_action_exits_with_3(self, runner):
        """Test that an unknown action is a failed result."""
        result = runner.invoke(cli, ["execute", "-a", "launch_rocket"])

        assert result.exit_code == 3
        assert "Unknown action: unknown" in result.output

    def test_intent_file_and_action_conflict(self, runner, tmp_path):
        """Test that --intent-file and --action are mutually exclusive."""
        intent_file = tmp_path / "intent.json"
        intent_file.write_text('{"action": "help"}')

        result = runner.invoke(cli, ["execute", "--intent-file", str(intent_file), "-a", "help"])

        assert result.exit_code == 2
        assert "not both" in result.output

    def test_requires_intent_source(self, runner):
        """Test that one of --intent-file or --action is required."""
        result = runner.invoke(cli, ["execute"])

        assert result.exit_code == 2
        assert "--intent-file or --action is required" in result.output

    def test_bad_entity_option(self, runner):
        """Test that a malformed --entity is a usage error."""
        result = runner.invoke(cli, ["execute", "-a", "create_company", "-e", "companyName"])

        assert result.exit_code == 2
        assert "Expected key=value" in result.output

    def test_missing_intent_file(self, runner, tmp_path):
        """Test that an unreadable intent file exits with 1."""
        result = runner.invoke(cli, ["execute", "--intent-file", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "Input Error" in result.output

    def test_intent_file_not_an_object(self, runner, tmp_path):
        """Test that a JSON array is rejected as an intent."""
        intent_file = tmp_path / "intent.json"
        intent_file.write_text("[1, 2]")

        result = runner.invoke(cli, ["execute", "--intent-file", str(intent_file)])

        assert result.exit_code == 1
        assert "must contain a JSON object" in result.output

    def test_invalid_json_intent_file(self, runner, tmp_path):
        """Test that malformed JSON exits with 4."""
        intent_file = tmp_path / "intent.json"
        intent_file.write_text("{not json")

        result = runner.invoke(cli, ["execute", "--intent-file", str(intent_file)])

        assert result.exit_code == 4
        assert "Data Validation Error" in result.output

    def test_corrupt_store_file(self, runner, tmp_path):
        """Test that an unreadable store exits with 2."""
        store_file = tmp_path / "store.json"
        store_file.write_text('{"version": "0.1", "records": {}}')

        result = runner.invoke(cli, ["execute", "-a", "help", "--store-file", str(store_file)])

        assert result.exit_code == 2
        assert "Store Error" in result.output
