"""Out-of-band administration of the credential store backends."""

from .base_admin import ServerAdministrator
from .mysql_admin import MySqlServerAdmin
from .sqlite_admin import SqliteServerAdmin
from .sqlserver_admin import SqlServerAdmin

__all__ = ["ServerAdministrator", "MySqlServerAdmin", "SqlServerAdmin", "SqliteServerAdmin"]
