"""
API key table model.

Just the data structure - no business logic or class methods.
All operations are handled by the credential stores.
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func, text

from ..constants import Defaults, Limits
from .db_config import Base


class ApiKey(Base):
    """One issued API key, stored by hash only."""

    __tablename__ = Defaults.TABLE_NAME

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Unique constraint on the hash is what makes concurrent upserts safe
    hashed_key = Column(
        String(Limits.HASHED_KEY_LENGTH), nullable=False, unique=True, index=False
    )
    owner = Column(String(Limits.OWNER_LENGTH), nullable=False, index=True)
    key_type = Column(Integer, nullable=False, default=0, server_default=text("0"))
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("1"))
    key_id = Column(String(Limits.KEY_ID_LENGTH), nullable=True)
    created_ts = Column(DateTime, nullable=False, server_default=func.current_timestamp())

    def __repr__(self) -> str:
        return (
            f"ApiKey(id={self.id}, owner='{self.owner}', key_type={self.key_type}, "
            f"is_active={self.is_active})"
        )
