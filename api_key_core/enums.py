"""
Enums used across the api_key_core package.

This module contains enum definitions that are used by multiple modules
to avoid circular import issues.
"""

import enum


class BackendKind(str, enum.Enum):
    """Relational backends a credential store can be built for."""

    SQLITE = "sqlite"
    MYSQL = "mysql"
    SQLSERVER = "sqlserver"

    @property
    def is_hosted(self) -> bool:
        return self is not BackendKind.SQLITE


class KeyType(enum.IntEnum):
    """Key capability tiers. Only the standard tier is issued today."""

    STANDARD = 0


class SqlAuthentication(enum.IntEnum):
    """Authentication modes for SQL Server connections."""

    WINDOWS = 0
    SQL = 1


class UserPrivileges(enum.IntFlag):
    """
    Abstract privileges granted to a provisioned database user.

    Translated per engine into native grant statements by the server
    administrators.
    """

    NONE = 0
    READ = 1
    WRITE = 2
    ADMIN = 4
