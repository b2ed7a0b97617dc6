"""Credential stores, one per relational backend."""

from .base_store import ApiKeyStore
from .hosted_store import HostedApiKeyStore
from .mysql_store import MySqlApiKeyStore
from .sqlite_store import SqliteApiKeyStore
from .sqlserver_store import SqlServerApiKeyStore
from .store_factory import create, create_from_config, create_hosted

__all__ = [
    "ApiKeyStore",
    "HostedApiKeyStore",
    "SqliteApiKeyStore",
    "MySqlApiKeyStore",
    "SqlServerApiKeyStore",
    "create",
    "create_hosted",
    "create_from_config",
]
