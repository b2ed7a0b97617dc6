"""
Constants and enums for the API Key Core package.

This module centralizes magic strings and defaults used by the stores,
connection descriptors and the authentication gateway.
"""

from enum import Enum


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    DEBUG = "DEBUG"

    APIKEY_BACKEND = "APIKEY_BACKEND"
    APIKEY_HEADER = "APIKEY_HEADER"
    APIKEY_DEV_BYPASS = "APIKEY_DEV_BYPASS"

    SQLITE_DIR = "APIKEY_SQLITE_DIR"
    SQLITE_DB_NAME = "APIKEY_SQLITE_DB_NAME"

    MYSQL_SERVER = "APIKEY_MYSQL_SERVER"
    MYSQL_PORT = "APIKEY_MYSQL_PORT"
    MYSQL_DATABASE = "APIKEY_MYSQL_DATABASE"
    MYSQL_USER = "APIKEY_MYSQL_USER"
    MYSQL_PASSWORD = "APIKEY_MYSQL_PASSWORD"

    SQLSERVER_SERVER = "APIKEY_SQLSERVER_SERVER"
    SQLSERVER_DATABASE = "APIKEY_SQLSERVER_DATABASE"
    SQLSERVER_AUTHENTICATION = "APIKEY_SQLSERVER_AUTHENTICATION"
    SQLSERVER_USER = "APIKEY_SQLSERVER_USER"
    SQLSERVER_PASSWORD = "APIKEY_SQLSERVER_PASSWORD"
    SQLSERVER_TRUST_CERTIFICATE = "APIKEY_SQLSERVER_TRUST_CERTIFICATE"
    SQLSERVER_DRIVER = "APIKEY_SQLSERVER_DRIVER"


class AppEnvironment(str, Enum):
    """Application environments recognised by the gateway."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class GatewayMessage(str, Enum):
    """Response bodies written by the authentication gateway."""

    MISSING_KEY = "API Key is missing"
    INVALID_KEY = "Invalid API Key"


class RequestStateKey(str, Enum):
    """Attribute names set on ``request.state`` for accepted requests."""

    OWNER = "api_key_owner"
    KEY_TYPE = "api_key_type"
    CORRELATION_ID = "correlation_id"


class Defaults:
    """Default values shared by descriptors and stores."""

    API_KEY_HEADER = "X-API-KEY"
    CORRELATION_HEADER = "X-Correlation-ID"
    DATABASE_NAME = "ApiCore"
    SQLITE_FILE_NAME = "ApiCore.db"
    TABLE_NAME = "api_keys"
    UPSERT_PROCEDURE = "sp_add_api_key"

    MYSQL_SERVER = "localhost"
    MYSQL_PORT = "3306"

    SQLSERVER_SYSTEM_DATABASE = "master"
    SQLSERVER_DRIVER = "ODBC Driver 18 for SQL Server"

    WINDOWS_DATA_DIR = r"C:\ProgramData\ApiCore\Data"
    LINUX_DATA_DIR = "/var/lib/apicore/data"
    MACOS_DATA_DIR = "~/Library/Application Support/ApiCore/Data"

    GENERATED_KEY_BYTES = 32
    LOGGED_HASH_PREFIX = 8


class Limits:
    """Column sizes for the api_keys table."""

    HASHED_KEY_LENGTH = 255
    OWNER_LENGTH = 100
    KEY_ID_LENGTH = 100
