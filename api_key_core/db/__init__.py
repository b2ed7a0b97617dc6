"""
Database layer for the API key core.

Provides the api_keys table model, the engine/session manager and the
per-backend connection descriptors.
"""

from .db_api_key_models import ApiKey
from .db_config import Base, DatabaseManager, describe_db_error
from .db_connections import (
    MySqlConnection,
    SqliteConnection,
    SqlServerConnection,
    get_default_data_directory,
)

__all__ = [
    "ApiKey",
    "Base",
    "DatabaseManager",
    "describe_db_error",
    "MySqlConnection",
    "SqliteConnection",
    "SqlServerConnection",
    "get_default_data_directory",
]
