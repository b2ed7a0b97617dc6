"""SQL Server credential store."""

from typing import List

from sqlalchemy import text
from sqlalchemy.engine import URL, Connection

from ..constants import Defaults, Limits
from ..db.db_config import DatabaseManager
from ..db.db_connections import SqlServerConnection
from ..enums import BackendKind
from ..utils.sql_identifiers import quote_sqlserver_identifier, quote_sqlserver_literal
from .hosted_store import HostedApiKeyStore

TABLE = f"dbo.{Defaults.TABLE_NAME}"
PROCEDURE = f"dbo.{Defaults.UPSERT_PROCEDURE}"

CREATE_TABLE = f"""
IF OBJECT_ID(N'{TABLE}', N'U') IS NULL
CREATE TABLE {TABLE} (
    id INT IDENTITY(1,1) PRIMARY KEY,
    hashed_key NVARCHAR({Limits.HASHED_KEY_LENGTH}) NOT NULL
        CONSTRAINT uq_{Defaults.TABLE_NAME}_hashed_key UNIQUE,
    owner NVARCHAR({Limits.OWNER_LENGTH}) NOT NULL,
    key_type INT NOT NULL DEFAULT 0,
    is_active BIT NOT NULL DEFAULT 1,
    created_ts DATETIME NOT NULL DEFAULT GETDATE(),
    key_id NVARCHAR({Limits.KEY_ID_LENGTH}) NULL
)
"""

CREATE_OWNER_INDEX = f"""
IF NOT EXISTS (
    SELECT 1 FROM sys.indexes
    WHERE name = N'ix_{Defaults.TABLE_NAME}_owner' AND object_id = OBJECT_ID(N'{TABLE}')
)
CREATE INDEX ix_{Defaults.TABLE_NAME}_owner ON {TABLE} (owner)
"""

# MERGE with HOLDLOCK keeps the upsert atomic under concurrent calls for one hash
CREATE_PROCEDURE = f"""
CREATE OR ALTER PROCEDURE {PROCEDURE}
    @owner NVARCHAR({Limits.OWNER_LENGTH}),
    @hashed_key NVARCHAR({Limits.HASHED_KEY_LENGTH}),
    @key_type INT
AS
BEGIN
    SET NOCOUNT ON;
    MERGE {TABLE} WITH (HOLDLOCK) AS target
    USING (SELECT @hashed_key AS hashed_key) AS source
    ON target.hashed_key = source.hashed_key
    WHEN MATCHED THEN
        UPDATE SET key_type = @key_type, is_active = 1
    WHEN NOT MATCHED THEN
        INSERT (hashed_key, owner, key_type, is_active)
        VALUES (@hashed_key, @owner, @key_type, 1);
END
"""

EXEC_PROCEDURE = (
    f"EXEC {PROCEDURE} @owner = :owner, @hashed_key = :hashed_key, @key_type = :key_type"
)


class SqlServerApiKeyStore(HostedApiKeyStore):
    """Credential store on SQL Server, inserting through ``dbo.sp_add_api_key``."""

    backend = BackendKind.SQLSERVER
    descriptor_class = SqlServerConnection

    def __init__(self, descriptor: SqlServerConnection, logger=None):
        super().__init__(descriptor, logger)

    def _server_url(self) -> URL:
        master = self.descriptor.model_copy(
            update={"database": Defaults.SQLSERVER_SYSTEM_DATABASE}
        )
        return master.get_sqlalchemy_url()

    def _open_server_connection(self, server: DatabaseManager):
        # CREATE DATABASE is not allowed inside a transaction
        return server.engine.execution_options(isolation_level="AUTOCOMMIT").connect()

    def _create_database(self, connection: Connection, database: str) -> None:
        connection.exec_driver_sql(
            f"IF DB_ID({quote_sqlserver_literal(database)}) IS NULL "
            f"CREATE DATABASE {quote_sqlserver_identifier(database)}"
        )

    def _schema_statements(self) -> List[str]:
        return [CREATE_TABLE, CREATE_OWNER_INDEX, CREATE_PROCEDURE]

    def _upsert(self, connection: Connection, hashed_key: str, owner: str, key_type: int) -> None:
        connection.execute(
            text(EXEC_PROCEDURE),
            {"owner": owner, "hashed_key": hashed_key, "key_type": key_type},
        )
