"""Shared pytest fixtures for all tests."""

import pytest

from config import Config
from db.manager import DatabaseManager
from services.base import Services
from tests.helpers import run_migrations


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration pointing to a temporary database.

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Config: Test configuration object.
    """
    return Config(
        base_dir=tmp_path / "otaccounts",
        db_data_dir=tmp_path / "otaccounts" / "db",
        db_filename="test.db",
        log_level="DEBUG",
        log_dir=tmp_path / "otaccounts" / "logs",
        pool_size=2,
        pool_timeout=1.0,
        busy_timeout=1.0,
    )


@pytest.fixture
def db_manager(test_config):
    """Create a DatabaseManager on an empty database file.

    Yields:
        DatabaseManager: Database manager without schema.
    """
    manager = DatabaseManager(test_config)
    yield manager
    manager.dispose()


@pytest.fixture
def db_manager_with_schema(db_manager):
    """Create a DatabaseManager with schema already set up.

    Returns:
        DatabaseManager: Database manager with all migrations applied.
    """
    run_migrations(db_manager)
    return db_manager


@pytest.fixture
def services(test_config, db_manager_with_schema):
    """Create a Services container with test database.

    Args:
        test_config: Test configuration fixture.
        db_manager_with_schema: Database manager with schema set up.

    Returns:
        Services: Services container for testing.
    """
    return Services(test_config, db_manager=db_manager_with_schema)
