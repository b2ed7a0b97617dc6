"""
Pydantic schemas for API key records and validation results.

These are the values the credential stores hand back to callers; the
SQLAlchemy model never leaves the store.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..enums import KeyType


class CredentialRecord(BaseModel):
    """Stored, hashed representation of one issued API key."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    hashed_key: str = Field(..., min_length=1, description="Digest of the raw key")
    owner: str = Field(..., description="Principal the key belongs to")
    key_type: int = Field(default=KeyType.STANDARD, ge=0, description="Key tier")
    is_active: bool = Field(default=True)
    external_id: Optional[str] = Field(None, description="Human-facing label, not used for lookup")
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, api_key) -> "CredentialRecord":
        """Build a record from an ``ApiKey`` row."""
        return cls(
            hashed_key=api_key.hashed_key,
            owner=api_key.owner,
            key_type=api_key.key_type,
            is_active=bool(api_key.is_active),
            external_id=api_key.key_id,
            created_at=api_key.created_ts,
        )

    def __str__(self) -> str:
        return f"Key Type: {self.key_type}, Owner: {self.owner}, Active: {self.is_active}"


class ValidationResult(BaseModel):
    """Outcome of validating a presented key."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    owner: Optional[str] = None
    key_type: int = KeyType.STANDARD

    @model_validator(mode="after")
    def check_invalid_has_no_owner(self) -> "ValidationResult":
        if not self.is_valid and self.owner is not None:
            raise ValueError("An invalid result cannot carry an owner")
        return self

    @classmethod
    def invalid(cls) -> "ValidationResult":
        return cls(is_valid=False)

    @classmethod
    def from_record(cls, record: Optional[CredentialRecord]) -> "ValidationResult":
        if record is None or not record.is_active:
            return cls.invalid()
        return cls(is_valid=True, owner=record.owner, key_type=record.key_type)
