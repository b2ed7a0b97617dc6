"""Request context for authenticated API keys."""

from .api_key_context import ApiKeyContext, api_key_identity

__all__ = ["ApiKeyContext", "api_key_identity"]
