"""MySQL server administrator."""

from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..db.db_connections import MySqlConnection
from ..enums import BackendKind, UserPrivileges
from ..exceptions import BaseError
from ..utils.sql_identifiers import mysql_privileges, quote_mysql_identifier, quote_mysql_literal
from .base_admin import ServerAdministrator

LIST_USERS = (
    "SELECT DISTINCT GRANTEE FROM INFORMATION_SCHEMA.SCHEMA_PRIVILEGES "
    "WHERE TABLE_SCHEMA = :database"
)


def grantee_user_name(grantee: str) -> str:
    """
    Extract the user name from a GRANTEE value.

    Example:
        grantee_user_name("'api_user'@'%'") -> "api_user"
    """
    user = grantee.rsplit("@", 1)[0]
    if len(user) >= 2 and user[0] == user[-1] == "'":
        user = user[1:-1]
    return user.replace("''", "'")


class MySqlServerAdmin(ServerAdministrator):
    """
    Administrator for a MySQL server.

    Connects at server level. Users are created for host ``localhost``
    when the server is local, otherwise for any host (``%``).
    """

    backend = BackendKind.MYSQL

    def __init__(self, connection: MySqlConnection, logger=None):
        super().__init__(connection.to_server_connection(), logger)

    @property
    def user_host(self) -> str:
        return "localhost" if self.admin_connection.server.lower() == "localhost" else "%"

    def _account(self, username: str) -> str:
        return f"{quote_mysql_literal(username)}@{quote_mysql_literal(self.user_host)}"

    def create_user(
        self,
        username: str,
        password: str,
        privileges: UserPrivileges,
        database: Optional[str] = None,
    ) -> bool:
        try:
            grants = mysql_privileges(privileges)
            account = self._account(username)
            scope = f"{quote_mysql_identifier(database)}.*" if database else "*.*"
            self._execute(
                [
                    f"CREATE USER IF NOT EXISTS {account} IDENTIFIED BY {quote_mysql_literal(password)}",
                    f"GRANT {grants} ON {scope} TO {account}",
                    "FLUSH PRIVILEGES",
                ]
            )
        except (SQLAlchemyError, BaseError) as e:
            self._log_failure(e, "create_user", username=username, database=database)
            return False

        self.logger.info(
            "MySQL user created",
            extra={"username": username, "database": database, "grants": grants},
        )
        return True

    def delete_user(self, username: str) -> bool:
        try:
            self._execute([f"DROP USER IF EXISTS {self._account(username)}", "FLUSH PRIVILEGES"])
        except (SQLAlchemyError, BaseError) as e:
            self._log_failure(e, "delete_user", username=username)
            return False

        self.logger.info("MySQL user deleted", extra={"username": username})
        return True

    def list_users(self, database: str) -> List[str]:
        try:
            with self._connect() as connection:
                rows = connection.execute(text(LIST_USERS), {"database": database}).fetchall()
        except SQLAlchemyError as e:
            self._log_failure(e, "list_users", database=database)
            return []

        return sorted({grantee_user_name(row[0]) for row in rows})

    def delete_database(self, name: str) -> bool:
        if not name:
            return False

        try:
            self._execute([f"DROP DATABASE IF EXISTS {quote_mysql_identifier(name)}"])
        except (SQLAlchemyError, BaseError) as e:
            self._log_failure(e, "delete_database", database=name)
            return False

        self.logger.info("MySQL database deleted", extra={"database": name})
        return True
