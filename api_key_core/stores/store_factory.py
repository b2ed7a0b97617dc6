"""
Store factory.

Selects and constructs the credential store for a backend kind. Used at
bootstrap and provisioning time only, never per request.
"""

from typing import Dict, Optional, Type

from ..config import AppConfig, get_config
from ..constants import Defaults
from ..db.db_connections import MySqlConnection, SqlServerConnection
from ..enums import BackendKind, SqlAuthentication
from ..exceptions import ConfigurationError, ErrorCode, UnsupportedBackendError, missing_setting
from .base_store import ApiKeyStore
from .hosted_store import HostedApiKeyStore
from .mysql_store import MySqlApiKeyStore
from .sqlite_store import SqliteApiKeyStore
from .sqlserver_store import SqlServerApiKeyStore

HOSTED_STORES: Dict[BackendKind, Type[HostedApiKeyStore]] = {
    BackendKind.MYSQL: MySqlApiKeyStore,
    BackendKind.SQLSERVER: SqlServerApiKeyStore,
}


def _as_backend_kind(backend_kind) -> BackendKind:
    try:
        return BackendKind(backend_kind)
    except ValueError:
        raise UnsupportedBackendError(
            f"Unknown backend kind: {backend_kind}", backend=str(backend_kind)
        )


def create(
    backend_kind,
    directory: Optional[str] = None,
    database_name: str = Defaults.SQLITE_FILE_NAME,
    logger=None,
) -> ApiKeyStore:
    """
    Create the embedded credential store.

    Args:
        backend_kind: Must be BackendKind.SQLITE
        directory: Optional data directory (platform default when omitted)
        database_name: Database file name
        logger: Optional logger passed to the store

    Raises:
        UnsupportedBackendError: For any other backend kind
        ConfigurationError: If the data directory cannot be resolved
    """
    kind = _as_backend_kind(backend_kind)
    if kind != BackendKind.SQLITE:
        raise UnsupportedBackendError(
            f"Backend '{kind.value}' requires a connection descriptor; use create_hosted",
            backend=kind.value,
        )
    return SqliteApiKeyStore(directory=directory, database_name=database_name, logger=logger)


def create_hosted(backend_kind, descriptor, logger=None) -> ApiKeyStore:
    """
    Create a hosted credential store bound to a connection descriptor.

    Raises:
        UnsupportedBackendError: If the kind is not a supported hosted backend,
            or the descriptor belongs to a different backend
    """
    kind = _as_backend_kind(backend_kind)
    if kind not in HOSTED_STORES:
        raise UnsupportedBackendError(
            f"No hosted credential store for backend '{kind.value}'", backend=kind.value
        )

    # The store rejects a descriptor of another backend
    return HOSTED_STORES[kind](descriptor, logger=logger)


def _mysql_descriptor(config: AppConfig) -> MySqlConnection:
    settings = config.mysql
    if not settings.user:
        raise missing_setting("user", "MySQL")
    if not settings.password:
        raise missing_setting("password", "MySQL")

    return MySqlConnection(
        server=settings.server or Defaults.MYSQL_SERVER,
        port=settings.port or Defaults.MYSQL_PORT,
        database=settings.database or Defaults.DATABASE_NAME,
        user=settings.user,
        password=settings.password,
    )


def _sqlserver_descriptor(config: AppConfig) -> SqlServerConnection:
    settings = config.sqlserver
    if not settings.server:
        raise missing_setting("server", "SQL Server")

    authentication = SqlAuthentication.WINDOWS
    if settings.authentication is not None:
        authentication = settings.parse_authentication()
        if authentication is None:
            raise ConfigurationError(
                f"Invalid SQL Server authentication mode: {settings.authentication}",
                setting="authentication",
                error_code=ErrorCode.INVALID_FORMAT,
            )

    return SqlServerConnection(
        server=settings.server,
        database=settings.database or Defaults.DATABASE_NAME,
        authentication=authentication,
        user=settings.user,
        password=settings.password,
        trust_server_certificate=settings.trust_server_certificate,
        driver=settings.driver,
    )


def create_from_config(config: Optional[AppConfig] = None, logger=None) -> ApiKeyStore:
    """
    Build the store selected by ``gateway.backend`` from application configuration.

    Required settings are checked before any descriptor is constructed.
    """
    config = config or get_config()
    kind = _as_backend_kind(config.gateway.backend)

    if kind == BackendKind.SQLITE:
        return create(
            kind,
            directory=config.sqlite.directory,
            database_name=config.sqlite.database_name,
            logger=logger,
        )
    if kind == BackendKind.MYSQL:
        return create_hosted(kind, _mysql_descriptor(config), logger=logger)
    if kind == BackendKind.SQLSERVER:
        return create_hosted(kind, _sqlserver_descriptor(config), logger=logger)

    raise UnsupportedBackendError(f"Unsupported backend: {kind.value}", backend=kind.value)
