"""
Quoting helpers for administrative SQL.

Server administration statements (CREATE USER, GRANT, DROP DATABASE, ...)
cannot take identifiers as bind parameters, so every caller-supplied name
or literal placed into such a statement must go through one of the pure
functions in this module first.
"""

from typing import List

from ..enums import UserPrivileges
from ..exceptions import ErrorCode, ValidationError

MYSQL_MAX_IDENTIFIER_LENGTH = 64
SQLSERVER_MAX_IDENTIFIER_LENGTH = 128


def _check_identifier(name: str, max_length: int, dialect: str) -> None:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(
            f"{dialect} identifier must be a non-empty string",
            error_code=ErrorCode.MISSING_REQUIRED,
            field="identifier",
        )
    if "\x00" in name:
        raise ValidationError(
            f"{dialect} identifier cannot contain NUL characters",
            error_code=ErrorCode.INVALID_FORMAT,
            field="identifier",
        )
    if len(name) > max_length:
        raise ValidationError(
            f"{dialect} identifier exceeds {max_length} characters",
            error_code=ErrorCode.INVALID_FORMAT,
            field="identifier",
            length=len(name),
        )


def _check_literal(value: str, dialect: str) -> None:
    if not isinstance(value, str):
        raise ValidationError(
            f"{dialect} literal must be a string",
            error_code=ErrorCode.TYPE_MISMATCH,
            field="literal",
        )
    if "\x00" in value:
        raise ValidationError(
            f"{dialect} literal cannot contain NUL characters",
            error_code=ErrorCode.INVALID_FORMAT,
            field="literal",
        )


# ==================== MYSQL ====================


def quote_mysql_identifier(name: str) -> str:
    """
    Quote a MySQL identifier (database, table, user name part).

    Example:
        quote_mysql_identifier("api`keys") -> "`api``keys`"
    """
    _check_identifier(name, MYSQL_MAX_IDENTIFIER_LENGTH, "MySQL")
    return "`" + name.replace("`", "``") + "`"


def quote_mysql_literal(value: str) -> str:
    """
    Quote a MySQL string literal (user name, host, password).

    Backslashes are escaped as well since the server runs without
    NO_BACKSLASH_ESCAPES by default.
    """
    _check_literal(value, "MySQL")
    return "'" + value.replace("\\", "\\\\").replace("'", "''") + "'"


def mysql_privileges(privileges: UserPrivileges) -> str:
    """
    Translate abstract privileges into a MySQL GRANT privilege list.

    Raises:
        ValidationError: If no privileges are given
    """
    privileges = UserPrivileges(privileges)
    if privileges == UserPrivileges.NONE:
        raise ValidationError(
            "No privileges specified",
            error_code=ErrorCode.MISSING_REQUIRED,
            field="privileges",
        )

    if UserPrivileges.ADMIN in privileges:
        return "ALL PRIVILEGES"

    parts: List[str] = []
    if UserPrivileges.READ in privileges:
        parts.append("SELECT")
    if UserPrivileges.WRITE in privileges:
        parts.extend(["INSERT", "UPDATE"])

    return ", ".join(parts)


# ==================== SQL SERVER ====================


def quote_sqlserver_identifier(name: str) -> str:
    """
    Quote a SQL Server identifier with brackets, same as QUOTENAME().

    Example:
        quote_sqlserver_identifier("api]keys") -> "[api]]keys]"
    """
    _check_identifier(name, SQLSERVER_MAX_IDENTIFIER_LENGTH, "SQL Server")
    return "[" + name.replace("]", "]]") + "]"


def quote_sqlserver_literal(value: str) -> str:
    """Quote a SQL Server unicode string literal."""
    _check_literal(value, "SQL Server")
    return "N'" + value.replace("'", "''") + "'"


def sqlserver_role_statements(privileges: UserPrivileges, username: str) -> List[str]:
    """
    Translate abstract privileges into SQL Server database role memberships.

    Args:
        privileges: Privileges to grant
        username: Database user receiving the roles

    Returns:
        ALTER ROLE statements, one per role

    Raises:
        ValidationError: If no privileges are given
    """
    privileges = UserPrivileges(privileges)
    if privileges == UserPrivileges.NONE:
        raise ValidationError(
            "No privileges specified",
            error_code=ErrorCode.MISSING_REQUIRED,
            field="privileges",
        )

    member = quote_sqlserver_identifier(username)

    if UserPrivileges.ADMIN in privileges:
        roles = ["db_owner"]
    else:
        roles = []
        if UserPrivileges.READ in privileges:
            roles.append("db_datareader")
        if UserPrivileges.WRITE in privileges:
            roles.append("db_datawriter")

    return [f"ALTER ROLE {role} ADD MEMBER {member};" for role in roles]
