"""
API key authentication gateway.

Intercepts every request before it reaches a route:

- header missing -> 401 "API Key is missing"
- key unknown or inactive -> 403 "Invalid API Key"
- key valid -> owner and key type attached to ``request.state`` and to
  ``ApiKeyContext`` for the rest of the request

Every authenticated path also gets a correlation id, taken from the
``X-Correlation-ID`` header or generated. It is active for errors raised
while the request is handled and echoed on the response.

The store lookup is blocking, so it runs in Starlette's thread pool and
never stalls the event loop. If the client goes away while the lookup is
pending, the awaiting task is cancelled and nothing is accepted.
"""

import uuid
from typing import Callable, Iterable, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import AppConfig, get_config
from ..constants import Defaults, GatewayMessage, RequestStateKey
from ..context.api_key_context import api_key_identity
from ..exceptions import ErrorCode, reset_correlation_id, set_correlation_id
from ..stores.base_store import ApiKeyStore
from ..utils.hash_utils import hash_api_key, hash_prefix
from ..utils.logger import get_logger


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """
    Validates the API key header of each request against a credential store.

    The store is the only state shared between requests; it must be safe
    for concurrent use, which the pooled store engines are.
    """

    def __init__(
        self,
        app,
        store: ApiKeyStore,
        header_name: Optional[str] = None,
        skip_paths: Optional[Iterable[str]] = None,
        config: Optional[AppConfig] = None,
        logger=None,
    ):
        """
        Initialize the gateway.

        Args:
            app: ASGI application to wrap
            store: Credential store used for validation
            header_name: Header carrying the key (default: gateway config, X-API-KEY)
            skip_paths: Exact paths served without authentication
            config: Application config (default: global config)
            logger: Optional logger
        """
        super().__init__(app)
        config = config or get_config()

        self.store = store
        self.header_name = header_name or config.gateway.header_name
        self.skip_paths = frozenset(skip_paths or ())
        self.logger = logger or get_logger()

        # Bypass needs the explicit switch AND the development environment
        self.bypass = config.bypass_enabled
        if self.bypass:
            self.logger.warning(
                "API key validation is bypassed", extra={"environment": config.environment}
            )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if self.bypass or request.url.path in self.skip_paths:
            return await call_next(request)

        correlation_id = request.headers.get(Defaults.CORRELATION_HEADER) or str(uuid.uuid4())
        setattr(request.state, RequestStateKey.CORRELATION_ID.value, correlation_id)

        token = set_correlation_id(correlation_id)
        try:
            response = await self._authenticate(request, call_next, correlation_id)
        finally:
            reset_correlation_id(token)

        response.headers[Defaults.CORRELATION_HEADER] = correlation_id
        return response

    async def _authenticate(
        self, request: Request, call_next: Callable, correlation_id: str
    ) -> Response:
        request_info = {
            "path": request.url.path,
            "method": request.method,
            "correlation_id": correlation_id,
        }

        # Starlette headers are case-insensitive; an empty value is a key, not a missing one
        raw_key = request.headers.get(self.header_name)
        if raw_key is None:
            self.logger.warning(
                "API key missing",
                extra={**request_info, "error_code": ErrorCode.MISSING_API_KEY.value},
            )
            return PlainTextResponse(
                GatewayMessage.MISSING_KEY.value, status_code=status.HTTP_401_UNAUTHORIZED
            )

        hashed_key = hash_api_key(raw_key)
        try:
            result = await run_in_threadpool(self.store.validate, hashed_key)
        except Exception as e:
            self.logger.error(
                f"API key validation failed: {type(e).__name__}",
                extra={**request_info, "key_hash": hash_prefix(hashed_key)},
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": ErrorCode.INTERNAL_ERROR.name,
                    "message": "Internal error during authentication",
                    "correlation_id": correlation_id,
                },
            )

        if not result.is_valid:
            self.logger.warning(
                "Invalid API key",
                extra={
                    **request_info,
                    "error_code": ErrorCode.INVALID_API_KEY.value,
                    "key_hash": hash_prefix(hashed_key),
                },
            )
            return PlainTextResponse(
                GatewayMessage.INVALID_KEY.value, status_code=status.HTTP_403_FORBIDDEN
            )

        setattr(request.state, RequestStateKey.OWNER.value, result.owner)
        setattr(request.state, RequestStateKey.KEY_TYPE.value, result.key_type)
        self.logger.debug(
            "API key accepted",
            extra={**request_info, "owner": result.owner, "key_type": result.key_type},
        )

        with api_key_identity(result.owner, result.key_type):
            return await call_next(request)


def install_api_key_middleware(
    app: FastAPI,
    store: ApiKeyStore,
    header_name: Optional[str] = None,
    skip_paths: Optional[Iterable[str]] = None,
    config: Optional[AppConfig] = None,
) -> None:
    """Register the gateway on a FastAPI application."""
    app.add_middleware(
        ApiKeyMiddleware,
        store=store,
        header_name=header_name,
        skip_paths=skip_paths,
        config=config,
    )


def get_api_key_owner(request: Request) -> Optional[str]:
    """Owner of the key that authenticated the request, if any."""
    return getattr(request.state, RequestStateKey.OWNER.value, None)


def get_api_key_type(request: Request) -> Optional[int]:
    """Key type of the key that authenticated the request, if any."""
    return getattr(request.state, RequestStateKey.KEY_TYPE.value, None)


def get_request_correlation_id(request: Request) -> Optional[str]:
    """Correlation id the gateway assigned to the request, if any."""
    return getattr(request.state, RequestStateKey.CORRELATION_ID.value, None)
