"""
Global pytest configuration and fixtures.
"""
import asyncio
import os
from decimal import Decimal
from typing import Dict

import pytest

from crm_engine.config import EngineConfig, reload_config
from crm_engine.models.budget import ProjectExpense, ProjectResource
from crm_engine.models.entities import parse_entities
from crm_engine.services.record_store import InMemoryRecordStore


@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        'ENVIRONMENT': 'testing',
        'DEBUG': 'true',
        'LOG_LEVEL': 'DEBUG',
        'DEFAULT_CURRENCY': 'USD',
    }


@pytest.fixture(autouse=True)
def mock_env(test_env_vars, monkeypatch, tmp_path):
    """Isolate every test from the developer's environment and .env file."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv('CRM_STORE_FILE', raising=False)
    monkeypatch.chdir(tmp_path)

    # Clear the global config to force reload with test values
    import crm_engine.config.settings
    crm_engine.config.settings._config = None

    yield test_env_vars

    # Clean up
    crm_engine.config.settings._config = None


@pytest.fixture
def test_config(mock_env) -> EngineConfig:
    """Test configuration instance."""
    return reload_config()


@pytest.fixture
def run():
    """Run a coroutine to completion from a synchronous test."""
    def _run(coroutine):
        return asyncio.run(coroutine)
    return _run


@pytest.fixture
def handle(run, test_config):
    """Run a handler class against a store with a raw entity map."""
    def _handle(handler_cls, store, entities):
        handler = handler_cls(store, test_config)
        return run(handler.handle(parse_entities(handler.action, entities)))
    return _handle


@pytest.fixture
def store() -> InMemoryRecordStore:
    """Empty in-memory record store."""
    return InMemoryRecordStore()


@pytest.fixture
def seeded_store(run) -> InMemoryRecordStore:
    """Store with two companies, a contact, a deal and a project."""
    store = InMemoryRecordStore()

    async def seed():
        techcorp = await store.companies.create({'name': 'TechCorp', 'industry': 'Software'})
        await store.companies.create({'name': 'Acme Industries', 'industry': 'Manufacturing'})
        await store.contacts.create({
            'company_id': techcorp.id,
            'first_name': 'John',
            'last_name': 'Smith',
            'email': 'john@tech.com',
        })
        await store.deals.create({
            'company_id': techcorp.id,
            'title': 'Website Redesign',
            'value': Decimal('50000'),
            'stage': 'negotiation',
            'probability': 60,
            'tags': ['web'],
        })
    run(seed())
    return store


@pytest.fixture
def sample_resources():
    """One hourly resource costing 500."""
    return [ProjectResource(name='Developer', hourly_rate=Decimal('50'), hours_allocated=Decimal('10'))]


@pytest.fixture
def sample_expenses():
    """One planned expense costing 100."""
    return [ProjectExpense(description='Licenses', category='software', planned_cost=Decimal('100'))]


@pytest.fixture(autouse=True)
def cleanup_test_files():
    """Clean up any test files created during testing."""
    yield

    # Remove test coverage files in case they're created
    test_files = ['coverage.xml', '.coverage']
    for file in test_files:
        if os.path.exists(file):
            os.remove(file)


# Pytest configuration for different test types
def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on location."""
    for item in items:
        # Add unit marker for tests in tests/unit/
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
