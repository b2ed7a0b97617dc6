"""
Request-scoped identity context for authenticated API keys.

The gateway sets the owner and key type of an accepted key here for the
duration of the request; downstream code and the logging filter read it.
Context variables are used so each in-flight request on the event loop (or
in a worker thread spawned from it) sees only its own identity.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Generator, Optional, Tuple

_current_owner: ContextVar[Optional[str]] = ContextVar("api_key_owner", default=None)
_current_key_type: ContextVar[Optional[int]] = ContextVar("api_key_type", default=None)


class ApiKeyContext:
    """Accessors for the identity attached to the current request."""

    @classmethod
    def set_identity(cls, owner: str, key_type: int) -> Tuple[Token, Token]:
        """
        Attach an identity to the current execution context.

        Returns:
            Tokens to pass to ``reset`` when the request completes
        """
        return _current_owner.set(owner), _current_key_type.set(key_type)

    @classmethod
    def reset(cls, tokens: Tuple[Token, Token]) -> None:
        owner_token, key_type_token = tokens
        _current_owner.reset(owner_token)
        _current_key_type.reset(key_type_token)

    @classmethod
    def get_current_owner(cls) -> Optional[str]:
        return _current_owner.get()

    @classmethod
    def get_current_key_type(cls) -> Optional[int]:
        return _current_key_type.get()

    @classmethod
    def clear(cls) -> None:
        _current_owner.set(None)
        _current_key_type.set(None)


@contextmanager
def api_key_identity(owner: str, key_type: int) -> Generator[None, None, None]:
    """
    Context manager that attaches an identity and restores the previous one on exit.

    Example:
        with api_key_identity("alice", 1):
            handle_request()
    """
    tokens = ApiKeyContext.set_identity(owner, key_type)
    try:
        yield
    finally:
        ApiKeyContext.reset(tokens)
