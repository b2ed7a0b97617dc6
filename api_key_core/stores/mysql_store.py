"""MySQL credential store."""

from typing import List

from sqlalchemy import text
from sqlalchemy.engine import URL, Connection

from ..constants import Defaults, Limits
from ..db.db_connections import MySqlConnection
from ..enums import BackendKind
from ..utils.sql_identifiers import quote_mysql_identifier
from .hosted_store import HostedApiKeyStore

TABLE = Defaults.TABLE_NAME
PROCEDURE = Defaults.UPSERT_PROCEDURE

CREATE_TABLE = f"""
CREATE TABLE IF NOT EXISTS {TABLE} (
    id INT AUTO_INCREMENT PRIMARY KEY,
    hashed_key VARCHAR({Limits.HASHED_KEY_LENGTH}) NOT NULL,
    owner VARCHAR({Limits.OWNER_LENGTH}) NOT NULL,
    key_type INT NOT NULL DEFAULT 0,
    is_active BOOLEAN NOT NULL DEFAULT TRUE,
    created_ts TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    key_id VARCHAR({Limits.KEY_ID_LENGTH}) NULL,
    UNIQUE KEY uq_{TABLE}_hashed_key (hashed_key),
    KEY ix_{TABLE}_owner (owner)
) CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci
"""

DROP_PROCEDURE = f"DROP PROCEDURE IF EXISTS {PROCEDURE}"

CREATE_PROCEDURE = f"""
CREATE PROCEDURE {PROCEDURE}(
    IN p_owner VARCHAR({Limits.OWNER_LENGTH}),
    IN p_hashed_key VARCHAR({Limits.HASHED_KEY_LENGTH}),
    IN p_key_type INT
)
BEGIN
    INSERT INTO {TABLE} (owner, hashed_key, key_type, is_active)
    VALUES (p_owner, p_hashed_key, p_key_type, TRUE)
    ON DUPLICATE KEY UPDATE key_type = p_key_type, is_active = TRUE;
END
"""

CALL_PROCEDURE = f"CALL {PROCEDURE}(:owner, :hashed_key, :key_type)"


class MySqlApiKeyStore(HostedApiKeyStore):
    """Credential store on a MySQL server, inserting through ``sp_add_api_key``."""

    backend = BackendKind.MYSQL
    descriptor_class = MySqlConnection

    def __init__(self, descriptor: MySqlConnection, logger=None):
        super().__init__(descriptor, logger)

    def _server_url(self) -> URL:
        return self.descriptor.to_server_connection().get_sqlalchemy_url()

    def _create_database(self, connection: Connection, database: str) -> None:
        connection.exec_driver_sql(
            f"CREATE DATABASE IF NOT EXISTS {quote_mysql_identifier(database)} "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )

    def _schema_statements(self) -> List[str]:
        return [CREATE_TABLE, DROP_PROCEDURE, CREATE_PROCEDURE]

    def _upsert(self, connection: Connection, hashed_key: str, owner: str, key_type: int) -> None:
        connection.execute(
            text(CALL_PROCEDURE),
            {"owner": owner, "hashed_key": hashed_key, "key_type": key_type},
        )
