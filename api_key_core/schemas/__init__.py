"""Pydantic schemas returned by the credential stores."""

from .api_key_schemas import CredentialRecord, ValidationResult

__all__ = ["CredentialRecord", "ValidationResult"]
