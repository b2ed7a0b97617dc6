"""
Shared behaviour of the client-server credential stores.

Schema initialization is an explicit two-step protocol:

1. Connect at server level (no target database) and create the database
   if it is missing. A connection cannot name a database that does not
   exist yet.
2. Connect to the target database and create the table and the upsert
   stored procedure.
"""

from abc import abstractmethod
from typing import List

from sqlalchemy import text
from sqlalchemy.engine import URL, Connection
from sqlalchemy.exc import SQLAlchemyError

from ..db.db_config import DatabaseManager
from ..exceptions import BaseError, UnsupportedBackendError
from .base_store import ApiKeyStore


class HostedApiKeyStore(ApiKeyStore):
    """Credential store bound to a hosted server through a connection descriptor."""

    descriptor_class: type

    def __init__(self, descriptor, logger=None):
        super().__init__(logger)
        self._descriptor = self._check_descriptor(descriptor)

    def _check_descriptor(self, descriptor):
        if not isinstance(descriptor, self.descriptor_class):
            raise UnsupportedBackendError(
                f"{self.backend.value} store needs a {self.descriptor_class.__name__}, "
                f"got {type(descriptor).__name__}",
                backend=self.backend.value,
            )
        return descriptor

    @property
    def descriptor(self):
        """Connection descriptor of the target server and database."""
        return self._descriptor

    @descriptor.setter
    def descriptor(self, value) -> None:
        """Rebind the store to another server; the next operation opens a new engine."""
        self._descriptor = self._check_descriptor(value)
        self._reset_manager()

    @property
    def connection_string(self) -> str:
        return self.descriptor.get_connection_string()

    @property
    def database_name(self):
        return self.descriptor.database

    @database_name.setter
    def database_name(self, value) -> None:
        self.descriptor.database = value
        self._reset_manager()

    def _build_url(self) -> URL:
        return self.descriptor.get_sqlalchemy_url()

    @abstractmethod
    def _server_url(self) -> URL:
        """URL that addresses the server without the target database."""

    @abstractmethod
    def _create_database(self, connection: Connection, database: str) -> None:
        """Create the target database if it is missing."""

    @abstractmethod
    def _schema_statements(self) -> List[str]:
        """DDL creating the table and the upsert procedure, one batch per entry."""

    def _open_server_connection(self, server: DatabaseManager):
        return server.engine.connect()

    def initialize_schema(self) -> bool:
        database = self.descriptor.database
        if not database:
            self.logger.error(
                "Cannot initialize schema without a target database",
                extra={"backend": self.backend.value},
            )
            return False

        try:
            # Step 1: server-level connection
            server = DatabaseManager(self._server_url())
            try:
                with self._open_server_connection(server) as connection:
                    self._create_database(connection, database)
                    connection.commit()
            finally:
                server.close()

            # Step 2: connection to the target database
            with self.manager.engine.begin() as connection:
                for statement in self._schema_statements():
                    connection.execute(text(statement))
        except (SQLAlchemyError, BaseError) as e:
            self._log_db_error(e, "initialize_schema", database=database)
            return False

        self.logger.info(
            "API key schema ready", extra={"backend": self.backend.value, "database": database}
        )
        return True
