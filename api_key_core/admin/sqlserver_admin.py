"""SQL Server administrator."""

from typing import List, Optional

from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from ..constants import Defaults
from ..db.db_connections import SqlServerConnection
from ..enums import BackendKind, UserPrivileges
from ..exceptions import BaseError
from ..utils.sql_identifiers import (
    quote_sqlserver_identifier,
    quote_sqlserver_literal,
    sqlserver_role_statements,
)
from .base_admin import ServerAdministrator


class SqlServerAdmin(ServerAdministrator):
    """
    Administrator for a SQL Server instance.

    Always connects to the ``master`` database. Logins are server-level;
    database users are created inside the target database and granted
    fixed database roles.
    """

    backend = BackendKind.SQLSERVER

    def __init__(self, connection: SqlServerConnection, logger=None):
        admin_connection = connection.model_copy(
            update={"database": Defaults.SQLSERVER_SYSTEM_DATABASE}
        )
        super().__init__(admin_connection, logger)

    def _connect(self) -> Connection:
        # Logins and databases cannot be created or dropped inside a transaction
        return self.manager.engine.execution_options(isolation_level="AUTOCOMMIT").connect()

    def create_user(
        self,
        username: str,
        password: str,
        privileges: UserPrivileges,
        database: Optional[str] = None,
    ) -> bool:
        try:
            role_statements = sqlserver_role_statements(privileges, username)
            login = quote_sqlserver_identifier(username)
            statements = [
                f"IF NOT EXISTS (SELECT 1 FROM sys.server_principals "
                f"WHERE name = {quote_sqlserver_literal(username)}) "
                f"CREATE LOGIN {login} WITH PASSWORD = {quote_sqlserver_literal(password)}"
            ]

            if database:
                in_database = " ".join(
                    [
                        f"IF NOT EXISTS (SELECT 1 FROM sys.database_principals "
                        f"WHERE name = {quote_sqlserver_literal(username)}) "
                        f"CREATE USER {login} FOR LOGIN {login};",
                        *role_statements,
                    ]
                )
                # sp_executesql runs in the context of the database that owns it
                statements.append(
                    f"EXEC {quote_sqlserver_identifier(database)}.sys.sp_executesql "
                    f"{quote_sqlserver_literal(in_database)}"
                )

            self._execute(statements)
        except (SQLAlchemyError, BaseError) as e:
            self._log_failure(e, "create_user", username=username, database=database)
            return False

        self.logger.info(
            "SQL Server login created", extra={"username": username, "database": database}
        )
        return True

    def delete_user(self, username: str) -> bool:
        try:
            drop_user = (
                f"IF EXISTS (SELECT 1 FROM sys.database_principals "
                f"WHERE name = {quote_sqlserver_literal(username)}) "
                f"DROP USER {quote_sqlserver_identifier(username)};"
            )
            # Drop the user from every online user database, then the login
            statements = [
                "DECLARE @sql NVARCHAR(MAX) = N''; "
                "SELECT @sql = @sql + N'USE ' + QUOTENAME(name) + N'; ' + "
                f"{quote_sqlserver_literal(drop_user)} + N' ' "
                "FROM sys.databases WHERE state_desc = N'ONLINE' AND database_id > 4; "
                "EXEC sys.sp_executesql @sql;",
                f"IF EXISTS (SELECT 1 FROM sys.server_principals "
                f"WHERE name = {quote_sqlserver_literal(username)}) "
                f"DROP LOGIN {quote_sqlserver_identifier(username)}",
            ]
            self._execute(statements)
        except (SQLAlchemyError, BaseError) as e:
            self._log_failure(e, "delete_user", username=username)
            return False

        self.logger.info("SQL Server login deleted", extra={"username": username})
        return True

    def list_users(self, database: str) -> List[str]:
        try:
            query = (
                f"SELECT name FROM {quote_sqlserver_identifier(database)}.sys.database_principals "
                "WHERE type IN ('S', 'U') AND principal_id > 4 ORDER BY name"
            )
            with self._connect() as connection:
                rows = connection.exec_driver_sql(query).fetchall()
        except (SQLAlchemyError, BaseError) as e:
            self._log_failure(e, "list_users", database=database)
            return []

        return [row[0] for row in rows]

    def delete_database(self, name: str) -> bool:
        if not name:
            return False

        try:
            database = quote_sqlserver_identifier(name)
            self._execute(
                [
                    f"IF DB_ID({quote_sqlserver_literal(name)}) IS NOT NULL "
                    f"BEGIN "
                    f"ALTER DATABASE {database} SET SINGLE_USER WITH ROLLBACK IMMEDIATE; "
                    f"DROP DATABASE {database}; "
                    f"END"
                ]
            )
        except (SQLAlchemyError, BaseError) as e:
            self._log_failure(e, "delete_database", database=name)
            return False

        self.logger.info("SQL Server database deleted", extra={"database": name})
        return True
