"""Utility modules for the API Key Core."""

# Hash utilities
from .hash_utils import generate_api_key, hash_api_key, hash_prefix, verify_api_key

# Logging utilities
from .logger import (
    ApiKeyContextFilter,
    AzureQueueHandler,
    ContextAwareLogger,
    configure_logging,
    get_logger,
)

# Administrative SQL quoting
from .sql_identifiers import (
    mysql_privileges,
    quote_mysql_identifier,
    quote_mysql_literal,
    quote_sqlserver_identifier,
    quote_sqlserver_literal,
    sqlserver_role_statements,
)

__all__ = [
    # Hash utilities
    "hash_api_key",
    "verify_api_key",
    "generate_api_key",
    "hash_prefix",
    # Logging utilities
    "ContextAwareLogger",
    "ApiKeyContextFilter",
    "AzureQueueHandler",
    "configure_logging",
    "get_logger",
    # SQL quoting
    "quote_mysql_identifier",
    "quote_mysql_literal",
    "mysql_privileges",
    "quote_sqlserver_identifier",
    "quote_sqlserver_literal",
    "sqlserver_role_statements",
]
