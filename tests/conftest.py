"""
Shared test fixtures for the API key core tests.

Provides a temporary SQLite credential store, patched engines for the
hosted backends, and resets of the global config/logging/context state.
"""

from unittest.mock import MagicMock, patch

import pytest

from api_key_core.config import reset_config
from api_key_core.context.api_key_context import ApiKeyContext
from api_key_core.db.db_connections import MySqlConnection, SqlServerConnection
from api_key_core.enums import SqlAuthentication
from api_key_core.stores.sqlite_store import SqliteApiKeyStore
from api_key_core.utils.logger import reset_logging


@pytest.fixture(autouse=True)
def reset_global_state():
    """Each test starts with fresh configuration, logger and request context."""
    reset_config()
    reset_logging()
    ApiKeyContext.clear()
    yield
    reset_config()
    reset_logging()
    ApiKeyContext.clear()


@pytest.fixture
def sqlite_store(tmp_path) -> SqliteApiKeyStore:
    """Initialized SQLite store in a temporary directory."""
    store = SqliteApiKeyStore(directory=str(tmp_path), database_name="test_keys.db")
    assert store.initialize_schema() is True
    yield store
    store.close()


@pytest.fixture
def sample_secret() -> str:
    return "abc123"


@pytest.fixture
def sample_owner() -> str:
    return "alice"


@pytest.fixture
def mysql_descriptor() -> MySqlConnection:
    return MySqlConnection(
        server="db.internal", port="3306", database="ApiCore", user="admin", password="s3cret"
    )


@pytest.fixture
def sqlserver_descriptor() -> SqlServerConnection:
    return SqlServerConnection(
        server="sql.internal",
        database="ApiCore",
        authentication=SqlAuthentication.SQL,
        user="sa",
        password="s3cret",
    )


@pytest.fixture
def mock_create_engine():
    """
    Patch engine creation for the hosted backends.

    Every DatabaseManager gets its own MagicMock engine, in creation order,
    available as ``mock_create_engine.engines``.
    """
    engines = []

    def make_engine(*args, **kwargs):
        engine = MagicMock(name=f"engine_{len(engines)}")
        engines.append(engine)
        return engine

    with patch("api_key_core.db.db_config.create_engine", side_effect=make_engine) as mocked:
        mocked.engines = engines
        yield mocked
