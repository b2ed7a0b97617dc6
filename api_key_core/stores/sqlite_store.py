"""Embedded SQLite credential store."""

from typing import Optional

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import URL, Connection
from sqlalchemy.exc import SQLAlchemyError

from ..constants import Defaults
from ..db.db_api_key_models import ApiKey
from ..db.db_connections import SqliteConnection
from ..enums import BackendKind
from .base_store import ApiKeyStore


class SqliteApiKeyStore(ApiKeyStore):
    """
    Credential store backed by a single SQLite file.

    The file lives in ``directory`` if given, otherwise in the platform
    default data directory. The directory is created at construction, so a
    location that cannot be created raises ConfigurationError immediately.
    """

    backend = BackendKind.SQLITE

    def __init__(
        self,
        directory: Optional[str] = None,
        database_name: str = Defaults.SQLITE_FILE_NAME,
        logger=None,
        descriptor: Optional[SqliteConnection] = None,
    ):
        super().__init__(logger)
        self.descriptor = descriptor or SqliteConnection(
            directory=directory, database_name=database_name
        )
        self.descriptor.resolve_directory()

    @property
    def connection_string(self) -> str:
        return self.descriptor.get_connection_string()

    @property
    def directory(self) -> str:
        """Resolved directory holding the database file."""
        return self.descriptor.resolved_directory

    @directory.setter
    def directory(self, value: Optional[str]) -> None:
        """
        Move the store to another directory.

        Raises:
            ConfigurationError: If the directory cannot be created; the store
                keeps its current location
        """
        descriptor = self.descriptor.model_copy(update={"directory": value})
        descriptor.resolve_directory()
        self.descriptor = descriptor
        self._reset_manager()

    @property
    def database_path(self) -> str:
        return self.descriptor.database_path

    @property
    def database_name(self) -> str:
        return self.descriptor.database_name

    @database_name.setter
    def database_name(self, value: str) -> None:
        self.descriptor.database_name = value
        self._reset_manager()

    def _build_url(self) -> URL:
        return self.descriptor.get_sqlalchemy_url()

    def initialize_schema(self) -> bool:
        try:
            self.manager.create_tables([ApiKey.__table__])
        except SQLAlchemyError as e:
            self._log_db_error(e, "initialize_schema", database=self.database_path)
            return False

        self.logger.info("API key schema ready", extra={"database": self.database_path})
        return True

    def _upsert(self, connection: Connection, hashed_key: str, owner: str, key_type: int) -> None:
        statement = sqlite_insert(ApiKey.__table__).values(
            hashed_key=hashed_key, owner=owner, key_type=key_type, is_active=True
        )
        statement = statement.on_conflict_do_update(
            index_elements=[ApiKey.__table__.c.hashed_key],
            set_={"key_type": statement.excluded.key_type, "is_active": True},
        )
        connection.execute(statement)
