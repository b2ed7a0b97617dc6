"""
Connection descriptors for the credential store backends.

Each descriptor carries the structured connection parameters for one
backend and renders them two ways: as the backend-native connection string
(``get_connection_string``) and as the SQLAlchemy URL used to build the
engine (``get_sqlalchemy_url``). Required values are validated when the
descriptor is constructed, so a bad configuration fails before first use.
"""

import os
import sys
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator
from sqlalchemy.engine import URL

from ..constants import Defaults
from ..enums import SqlAuthentication
from ..exceptions import ConfigurationError, ErrorCode, missing_setting


def get_default_data_directory() -> str:
    """
    Platform default directory for the embedded database file.

    Raises:
        ConfigurationError: If the platform has no known default
    """
    if sys.platform.startswith("win"):
        return Defaults.WINDOWS_DATA_DIR
    if sys.platform.startswith("linux"):
        return Defaults.LINUX_DATA_DIR
    if sys.platform == "darwin":
        return os.path.expanduser(Defaults.MACOS_DATA_DIR)

    raise ConfigurationError(
        f"No default data directory for platform '{sys.platform}'",
        setting="directory",
        platform=sys.platform,
    )


def _quote_odbc_value(value: str) -> str:
    # ODBC attribute values containing separators must be braced, with "}" doubled
    if any(ch in value for ch in ";{}=") or value != value.strip():
        return "{" + value.replace("}", "}}") + "}"
    return value


def _quote_mysql_value(value: str) -> str:
    if any(ch in value for ch in ";=\"'") or value != value.strip():
        return '"' + value.replace('"', '""') + '"'
    return value


class SqliteConnection(BaseModel):
    """Embedded SQLite database file location."""

    model_config = ConfigDict(validate_assignment=True)

    directory: Optional[str] = Field(
        default=None, description="Directory holding the file (platform default when unset)"
    )
    database_name: str = Field(default=Defaults.SQLITE_FILE_NAME, min_length=1)

    # (configured directory, resolved absolute directory)
    _resolved: Optional[Tuple[Optional[str], str]] = PrivateAttr(default=None)

    def resolve_directory(self) -> str:
        """
        Resolve the storage directory, creating it if missing.

        Returns:
            Absolute path of the directory

        Raises:
            ConfigurationError: If no directory can be determined or created
        """
        directory = self.directory or get_default_data_directory()
        directory = os.path.abspath(directory)

        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot create data directory: {directory}",
                setting="directory",
                cause=e,
                directory=directory,
            )

        self._resolved = (self.directory, directory)
        return directory

    @property
    def resolved_directory(self) -> str:
        """Resolved directory, created once per configured value."""
        if self._resolved is None or self._resolved[0] != self.directory:
            return self.resolve_directory()
        return self._resolved[1]

    @property
    def database_path(self) -> str:
        return os.path.join(self.resolved_directory, self.database_name)

    @property
    def database(self) -> str:
        return self.database_name

    @database.setter
    def database(self, value: str) -> None:
        self.database_name = value

    def get_connection_string(self) -> str:
        return f"Data Source={self.database_path}"

    def get_sqlalchemy_url(self) -> URL:
        return URL.create("sqlite", database=self.database_path)


class MySqlConnection(BaseModel):
    """
    MySQL server connection parameters.

    A descriptor with no database addresses the server instance itself,
    which is what database creation needs.
    """

    model_config = ConfigDict(validate_assignment=True)

    server: str = Field(default=Defaults.MYSQL_SERVER)
    port: Optional[str] = Field(default=Defaults.MYSQL_PORT)
    database: Optional[str] = Field(default=Defaults.DATABASE_NAME)
    user: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)

    @model_validator(mode="after")
    def check_required(self) -> "MySqlConnection":
        if not self.server:
            raise missing_setting("server", "MySQL")
        if not self.user:
            raise missing_setting("user", "MySQL")
        if not self.password:
            raise missing_setting("password", "MySQL")
        if self.port and not self.port.isdigit():
            raise ConfigurationError(
                f"Invalid MySQL port: {self.port}",
                setting="port",
                error_code=ErrorCode.INVALID_FORMAT,
            )
        return self

    @classmethod
    def server_connection(
        cls,
        user: str,
        password: str,
        server: str = Defaults.MYSQL_SERVER,
        port: Optional[str] = Defaults.MYSQL_PORT,
    ) -> "MySqlConnection":
        """Descriptor for server-level operations (no database selected)."""
        return cls(server=server, port=port, database=None, user=user, password=password)

    def to_server_connection(self) -> "MySqlConnection":
        return self.server_connection(self.user, self.password, self.server, self.port)

    @property
    def database_name(self) -> Optional[str]:
        return self.database

    @database_name.setter
    def database_name(self, value: Optional[str]) -> None:
        self.database = value

    def get_connection_string(self) -> str:
        parts = [f"Server={_quote_mysql_value(self.server)};"]
        if self.port:
            parts.append(f"Port={self.port};")
        if self.database:
            parts.append(f"Database={_quote_mysql_value(self.database)};")
        parts.append(f"User={_quote_mysql_value(self.user)};")
        parts.append(f"Password={_quote_mysql_value(self.password)};")
        return "".join(parts)

    def get_sqlalchemy_url(self) -> URL:
        return URL.create(
            "mysql+pymysql",
            username=self.user,
            password=self.password,
            host=self.server,
            port=int(self.port) if self.port else None,
            database=self.database or None,
            query={"charset": "utf8mb4"},
        )


class SqlServerConnection(BaseModel):
    """
    SQL Server connection parameters rendered as an ODBC connection string.

    Windows authentication uses a trusted connection; SQL authentication
    requires both user and password.
    """

    model_config = ConfigDict(validate_assignment=True)

    server: str
    database: Optional[str] = Field(default=Defaults.DATABASE_NAME)
    authentication: SqlAuthentication = SqlAuthentication.WINDOWS
    user: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    trust_server_certificate: bool = True
    driver: str = Defaults.SQLSERVER_DRIVER

    @model_validator(mode="after")
    def check_required(self) -> "SqlServerConnection":
        if not self.server:
            raise missing_setting("server", "SQL Server")
        if self.authentication == SqlAuthentication.SQL and not (self.user and self.password):
            raise ConfigurationError(
                "SQL authentication requires both user and password",
                setting="user",
                error_code=ErrorCode.MISSING_REQUIRED,
                backend="SQL Server",
            )
        return self

    @property
    def database_name(self) -> str:
        """Target database, falling back to the server's system database."""
        return self.database or Defaults.SQLSERVER_SYSTEM_DATABASE

    @database_name.setter
    def database_name(self, value: Optional[str]) -> None:
        self.database = value

    def get_connection_string(self) -> str:
        parts = [
            f"Driver={{{self.driver}}};",
            f"Server={_quote_odbc_value(self.server)};",
            f"Database={_quote_odbc_value(self.database_name)};",
        ]

        if self.authentication == SqlAuthentication.SQL:
            parts.append(f"UID={_quote_odbc_value(self.user)};")
            parts.append(f"PWD={_quote_odbc_value(self.password)};")
        else:
            parts.append("Trusted_Connection=yes;")

        parts.append(f"TrustServerCertificate={'yes' if self.trust_server_certificate else 'no'};")
        return "".join(parts)

    def get_sqlalchemy_url(self) -> URL:
        return URL.create("mssql+pyodbc", query={"odbc_connect": self.get_connection_string()})
