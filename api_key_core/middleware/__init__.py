"""Request-time API key authentication."""

from .api_key_middleware import (
    ApiKeyMiddleware,
    get_api_key_owner,
    get_api_key_type,
    get_request_correlation_id,
    install_api_key_middleware,
)

__all__ = [
    "ApiKeyMiddleware",
    "install_api_key_middleware",
    "get_api_key_owner",
    "get_api_key_type",
    "get_request_correlation_id",
]
