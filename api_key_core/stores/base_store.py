"""
Base credential store with the operations shared by every backend.

Lookups and deactivation are plain ORM/Core statements that run unchanged
on every dialect. Backends supply schema creation and the upsert path.
Backend failures never cross the store boundary: they are logged and
converted to ``False``, ``None`` or an empty list.
"""

import threading
from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import update
from sqlalchemy.engine import URL, Connection
from sqlalchemy.exc import SQLAlchemyError

from ..db.db_api_key_models import ApiKey
from ..db.db_config import DatabaseManager, describe_db_error
from ..enums import BackendKind, KeyType
from ..exceptions import BaseError
from ..schemas.api_key_schemas import CredentialRecord, ValidationResult
from ..utils.hash_utils import hash_api_key, hash_prefix
from ..utils.logger import get_logger


def _is_key_type(key_type) -> bool:
    return isinstance(key_type, int) and not isinstance(key_type, bool) and key_type >= 0


class ApiKeyStore(ABC):
    """Uniform credential store contract over one relational backend."""

    backend: BackendKind

    def __init__(self, logger=None):
        """
        Initialize the store.

        Args:
            logger: Optional logger; defaults to the package logger
        """
        self.logger = logger or get_logger()
        self._manager: Optional[DatabaseManager] = None
        self._manager_lock = threading.Lock()

    # ==================== BACKEND HOOKS ====================

    @property
    @abstractmethod
    def connection_string(self) -> str:
        """Backend-native connection string of the target database."""

    @abstractmethod
    def _build_url(self) -> URL:
        """SQLAlchemy URL of the target database."""

    @abstractmethod
    def initialize_schema(self) -> bool:
        """Idempotently create the storage this store needs."""

    @abstractmethod
    def _upsert(self, connection: Connection, hashed_key: str, owner: str, key_type: int) -> None:
        """Insert a record, or update key_type and reactivate on hash conflict."""

    # ==================== ENGINE ====================

    @property
    def manager(self) -> DatabaseManager:
        """Engine owner, created once on first use."""
        manager = self._manager
        if manager is None:
            with self._manager_lock:
                if self._manager is None:
                    self._manager = DatabaseManager(self._build_url())
                manager = self._manager
        return manager

    def _reset_manager(self) -> None:
        with self._manager_lock:
            manager, self._manager = self._manager, None
        if manager is not None:
            manager.close()

    def close(self) -> None:
        """Release pooled connections."""
        self._reset_manager()

    def _log_db_error(self, e: Exception, operation_name: str, **context) -> None:
        self.logger.error(
            f"Database error in {operation_name}: {describe_db_error(e)}",
            extra={"backend": self.backend.value, "operation_name": operation_name, **context},
        )

    def _to_record(self, api_key: ApiKey) -> Optional[CredentialRecord]:
        """Convert a row, treating a row that fails the schema as no record."""
        try:
            return CredentialRecord.from_model(api_key)
        except SchemaValidationError as e:
            self.logger.error(
                f"Stored API key record is malformed: {e.error_count()} validation error(s)",
                extra={
                    "backend": self.backend.value,
                    "key_hash": hash_prefix(api_key.hashed_key or ""),
                },
            )
            return None

    # ==================== OPERATIONS ====================

    def store_credential(
        self, raw_secret: str, owner: str, key_type: int = KeyType.STANDARD
    ) -> bool:
        """
        Hash a raw key and upsert it as an active record.

        Args:
            raw_secret: Plaintext key; only its hash is stored
            owner: Principal the key belongs to
            key_type: Key tier

        Returns:
            True if the record was stored, False on any failure
        """
        try:
            hashed_key = hash_api_key(raw_secret)
        except BaseError:
            return False

        if not owner:
            self.logger.warning("Refusing to store API key without owner")
            return False

        if not _is_key_type(key_type):
            self.logger.warning(
                "Refusing to store API key with invalid key type",
                extra={"owner": owner, "key_type": repr(key_type)},
            )
            return False

        key_hash = hash_prefix(hashed_key)
        try:
            with self.manager.engine.begin() as connection:
                self._upsert(connection, hashed_key, owner, int(key_type))
        except SQLAlchemyError as e:
            self._log_db_error(e, "store_credential", owner=owner, key_hash=key_hash)
            return False

        self.logger.info(
            "API key stored",
            extra={"owner": owner, "key_type": int(key_type), "key_hash": key_hash},
        )
        return True

    def find_by_hash(self, hashed_key: str) -> Optional[CredentialRecord]:
        """
        Find an active record by hash.

        Returns:
            The record, or None if it does not exist, is inactive or the
            backend failed
        """
        if not hashed_key:
            return None

        try:
            with self.manager.session_scope() as session:
                api_key = (
                    session.query(ApiKey)
                    .filter(
                        ApiKey.hashed_key == hashed_key,
                        ApiKey.is_active == True,  # noqa: E712
                    )
                    .first()
                )
                return self._to_record(api_key) if api_key else None
        except SQLAlchemyError as e:
            self._log_db_error(e, "find_by_hash", key_hash=hash_prefix(hashed_key))
            return None

    def find_by_secret(self, raw_secret: str) -> Optional[CredentialRecord]:
        try:
            hashed_key = hash_api_key(raw_secret)
        except BaseError:
            return None
        return self.find_by_hash(hashed_key)

    def list_by_owner(self, owner: str) -> List[CredentialRecord]:
        """List the active records of one owner, oldest first."""
        try:
            with self.manager.session_scope() as session:
                api_keys = (
                    session.query(ApiKey)
                    .filter(
                        ApiKey.owner == owner,
                        ApiKey.is_active == True,  # noqa: E712
                    )
                    .order_by(ApiKey.id)
                    .all()
                )
                records = [self._to_record(api_key) for api_key in api_keys]
                return [record for record in records if record is not None]
        except SQLAlchemyError as e:
            self._log_db_error(e, "list_by_owner", owner=owner)
            return []

    def validate(self, hashed_key: str) -> ValidationResult:
        """Validation contract used by the authentication gateway."""
        return ValidationResult.from_record(self.find_by_hash(hashed_key))

    def deactivate_credential(self, raw_secret: str) -> bool:
        """
        Mark the record for a raw key inactive.

        Returns:
            True if an active record was deactivated
        """
        try:
            hashed_key = hash_api_key(raw_secret)
        except BaseError:
            return False

        key_hash = hash_prefix(hashed_key)
        try:
            with self.manager.engine.begin() as connection:
                result = connection.execute(
                    update(ApiKey)
                    .where(
                        ApiKey.hashed_key == hashed_key,
                        ApiKey.is_active == True,  # noqa: E712
                    )
                    .values(is_active=False)
                )
        except SQLAlchemyError as e:
            self._log_db_error(e, "deactivate_credential", key_hash=key_hash)
            return False

        deactivated = result.rowcount > 0
        if deactivated:
            self.logger.info("API key deactivated", extra={"key_hash": key_hash})
        return deactivated
