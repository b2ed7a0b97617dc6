"""SQLite administration. A file-based database has no users, only a file."""

import os

from ..utils.logger import get_logger


class SqliteServerAdmin:
    """Deletes SQLite database files."""

    def __init__(self, logger=None):
        self.logger = logger or get_logger()

    def delete_database(self, database_path: str) -> bool:
        """
        Delete a SQLite database file.

        Returns:
            True if the file was deleted or did not exist, False if it could
            not be removed
        """
        if not os.path.exists(database_path):
            return True

        try:
            os.remove(database_path)
        except OSError as e:
            self.logger.error(
                f"Could not delete SQLite database: {e}", extra={"database": database_path}
            )
            return False

        self.logger.info("SQLite database deleted", extra={"database": database_path})
        return True
