"""
Base server administrator.

Administrators provision logins, users and databases on a hosted server.
They are used out of band, never on the request path. Every operation
catches backend failures and reports them as ``False`` (or an empty list).
"""

import threading
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from sqlalchemy.engine import URL, Connection

from ..db.db_config import DatabaseManager, describe_db_error
from ..enums import BackendKind, UserPrivileges
from ..utils.logger import get_logger


class ServerAdministrator(ABC):
    """User and database lifecycle operations for one hosted server."""

    backend: BackendKind

    def __init__(self, admin_connection, logger=None):
        self._admin_connection = admin_connection
        self.logger = logger or get_logger()
        self._manager: Optional[DatabaseManager] = None
        self._manager_lock = threading.Lock()

    @property
    def admin_connection(self):
        """Descriptor the administrator connects with."""
        return self._admin_connection

    @property
    def manager(self) -> DatabaseManager:
        manager = self._manager
        if manager is None:
            with self._manager_lock:
                if self._manager is None:
                    self._manager = DatabaseManager(self._admin_url())
                manager = self._manager
        return manager

    def _admin_url(self) -> URL:
        return self._admin_connection.get_sqlalchemy_url()

    def _connect(self) -> Connection:
        return self.manager.engine.connect()

    def _execute(self, statements: Iterable[str]) -> None:
        """
        Run pre-quoted administrative statements in one transaction.

        Statements go to the driver as-is; every interpolated name must
        already have passed through the dialect's quoting functions.
        """
        with self._connect() as connection:
            for statement in statements:
                connection.exec_driver_sql(statement)
            connection.commit()

    def _log_failure(self, e: Exception, operation_name: str, **context) -> None:
        self.logger.error(
            f"Administrative operation {operation_name} failed: {describe_db_error(e)}",
            extra={"backend": self.backend.value, "operation_name": operation_name, **context},
        )

    def close(self) -> None:
        with self._manager_lock:
            manager, self._manager = self._manager, None
        if manager is not None:
            manager.close()

    @abstractmethod
    def create_user(
        self,
        username: str,
        password: str,
        privileges: UserPrivileges,
        database: Optional[str] = None,
    ) -> bool:
        """
        Create a login/user and grant privileges.

        Args:
            username: User to create
            password: Password for the user
            privileges: Abstract privileges to grant
            database: Database the grant is scoped to; server-wide when None

        Returns:
            True on success
        """

    @abstractmethod
    def delete_user(self, username: str) -> bool:
        """Drop a user and its login."""

    @abstractmethod
    def list_users(self, database: str) -> List[str]:
        """Names of the users with access to a database."""

    @abstractmethod
    def delete_database(self, name: str) -> bool:
        """Drop a database if it exists."""
