"""
Centralized configuration management for the API key core.

This module provides a unified configuration system with support for:
- Environment variables
- Per-backend store settings
- Gateway settings
- Validation using Pydantic
"""

import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import AppEnvironment, Defaults, EnvironmentVariable, LogLevel
from .enums import BackendKind, SqlAuthentication


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


def _env_optional(name: str) -> Optional[str]:
    value = os.getenv(name)
    return value if value else None


class SqliteStoreConfig(BaseModel):
    """Embedded SQLite store configuration."""

    directory: Optional[str] = Field(
        default_factory=lambda: _env_optional(EnvironmentVariable.SQLITE_DIR.value),
        description="Directory holding the database file (platform default when unset)",
    )
    database_name: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.SQLITE_DB_NAME.value, Defaults.SQLITE_FILE_NAME
        ),
        description="Database file name",
    )


class MySqlStoreConfig(BaseModel):
    """MySQL server configuration."""

    server: Optional[str] = Field(
        default_factory=lambda: _env_optional(EnvironmentVariable.MYSQL_SERVER.value),
        description="MySQL host (defaults to localhost)",
    )
    port: Optional[str] = Field(
        default_factory=lambda: _env_optional(EnvironmentVariable.MYSQL_PORT.value),
        description="MySQL port (defaults to 3306)",
    )
    database: Optional[str] = Field(
        default_factory=lambda: _env_optional(EnvironmentVariable.MYSQL_DATABASE.value),
        description="Target database (defaults to ApiCore)",
    )
    user: Optional[str] = Field(
        default_factory=lambda: _env_optional(EnvironmentVariable.MYSQL_USER.value),
        description="MySQL user",
    )
    password: Optional[str] = Field(
        default_factory=lambda: _env_optional(EnvironmentVariable.MYSQL_PASSWORD.value),
        description="MySQL password",
    )

    def __repr__(self) -> str:
        """String representation with masked password for security."""
        return (
            f"MySqlStoreConfig(server='{self.server}', port='{self.port}', "
            f"database='{self.database}', user='{self.user}', password='***')"
        )


class SqlServerStoreConfig(BaseModel):
    """SQL Server configuration."""

    server: Optional[str] = Field(
        default_factory=lambda: _env_optional(EnvironmentVariable.SQLSERVER_SERVER.value),
        description="SQL Server instance",
    )
    database: Optional[str] = Field(
        default_factory=lambda: _env_optional(EnvironmentVariable.SQLSERVER_DATABASE.value),
        description="Target database (defaults to ApiCore)",
    )
    authentication: Optional[str] = Field(
        default_factory=lambda: _env_optional(
            EnvironmentVariable.SQLSERVER_AUTHENTICATION.value
        ),
        description="Authentication mode: 0 / windows or 1 / sql",
    )
    user: Optional[str] = Field(
        default_factory=lambda: _env_optional(EnvironmentVariable.SQLSERVER_USER.value),
        description="SQL authentication user",
    )
    password: Optional[str] = Field(
        default_factory=lambda: _env_optional(EnvironmentVariable.SQLSERVER_PASSWORD.value),
        description="SQL authentication password",
    )
    trust_server_certificate: bool = Field(
        default_factory=lambda: _env_flag(
            EnvironmentVariable.SQLSERVER_TRUST_CERTIFICATE.value, "true"
        ),
        description="Trust the server certificate without validation",
    )
    driver: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.SQLSERVER_DRIVER.value, Defaults.SQLSERVER_DRIVER
        ),
        description="ODBC driver name",
    )

    def parse_authentication(self) -> Optional[SqlAuthentication]:
        """
        Resolve the configured authentication mode.

        Returns:
            SqlAuthentication member, or None if the value is missing or unknown
        """
        if self.authentication is None:
            return None

        value = self.authentication.strip()
        if value.isdigit():
            try:
                return SqlAuthentication(int(value))
            except ValueError:
                return None

        try:
            return SqlAuthentication[value.upper()]
        except KeyError:
            return None

    def __repr__(self) -> str:
        """String representation with masked password for security."""
        return (
            f"SqlServerStoreConfig(server='{self.server}', database='{self.database}', "
            f"authentication='{self.authentication}', user='{self.user}', password='***')"
        )


class GatewayConfig(BaseModel):
    """Authentication gateway configuration."""

    backend: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.APIKEY_BACKEND.value, BackendKind.SQLITE.value
        ).lower(),
        description="Credential store backend kind, resolved by the store factory",
    )
    header_name: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.APIKEY_HEADER.value, Defaults.API_KEY_HEADER
        ),
        description="Header carrying the raw API key",
    )
    development_bypass: bool = Field(
        default_factory=lambda: _env_flag(EnvironmentVariable.APIKEY_DEV_BYPASS.value),
        description="Skip key validation; honored only in the development environment",
    )

    @field_validator("backend", mode="before")
    def normalize_backend(cls, v) -> str:
        """Accept BackendKind members or names in any case."""
        if isinstance(v, BackendKind):
            return v.value
        return str(v).strip().lower()


class QueueConfig(BaseModel):
    """Azure Storage Queue configuration for log shipping."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.AZURE_STORAGE_CONNECTION.value, ""),
        description="Azure Storage connection string",
    )
    logs_queue_name: str = Field(default="logs-queue", description="Logs queue name")
    enable_logs_queue: bool = Field(default=False, description="Ship logs to the queue")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.APP_ENV.value, AppEnvironment.PRODUCTION.value
        ),
        description="Application environment",
    )
    debug: bool = Field(
        default_factory=lambda: _env_flag(EnvironmentVariable.DEBUG.value),
        description="Debug mode",
    )

    sqlite: SqliteStoreConfig = Field(default_factory=SqliteStoreConfig)
    mysql: MySqlStoreConfig = Field(default_factory=MySqlStoreConfig)
    sqlserver: SqlServerStoreConfig = Field(default_factory=SqlServerStoreConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    queue: QueueConfig = Field(default_factory=QueueConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    custom: Dict[str, Any] = Field(default_factory=dict, description="Custom configuration values")

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() == AppEnvironment.DEVELOPMENT.value

    @property
    def bypass_enabled(self) -> bool:
        """True only when the bypass switch is on and the environment is development."""
        return self.gateway.development_bypass and self.is_development

    def get_custom(self, key: str, default: Any = None) -> Any:
        """Get a custom configuration value."""
        return self.custom.get(key, default)

    def set_custom(self, key: str, value: Any) -> None:
        """Set a custom configuration value."""
        self.custom[key] = value


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
