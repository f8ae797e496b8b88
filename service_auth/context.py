"""
Request Auth Context
====================
Typed, write-once per-request slots for the cached raw body and the
resolved identity.

Usage:
    from service_auth.context import require_identity

    @app.get("/v1/orders")
    async def list_orders(user: User = Depends(require_identity)):
        ...
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from fastapi import HTTPException
from starlette.requests import Request

from .constants import AUTH_CONTEXT_STATE_KEY
from .exceptions import ContextAlreadySetError

T = TypeVar("T")

_UNSET = object()


@dataclass
class AuthContext(Generic[T]):
    """Per-request auth state. Each slot may be written exactly once."""

    _raw_body: Any = field(default=_UNSET, repr=False)
    _identity: Any = field(default=_UNSET, repr=False)

    @property
    def raw_body(self) -> Optional[bytes]:
        return None if self._raw_body is _UNSET else self._raw_body

    @property
    def identity(self) -> Optional[T]:
        return None if self._identity is _UNSET else self._identity

    @property
    def has_identity(self) -> bool:
        return self._identity is not _UNSET

    def set_raw_body(self, body: bytes) -> None:
        if self._raw_body is not _UNSET:
            raise ContextAlreadySetError("raw body already set for this request")
        self._raw_body = bytes(body)

    def set_identity(self, identity: T) -> None:
        if self._identity is not _UNSET:
            raise ContextAlreadySetError("identity already set for this request")
        self._identity = identity


def get_auth_context(request: Request) -> AuthContext:
    """Return the request's AuthContext, creating it on first access."""
    context = getattr(request.state, AUTH_CONTEXT_STATE_KEY, None)
    if context is None:
        context = AuthContext()
        setattr(request.state, AUTH_CONTEXT_STATE_KEY, context)
    return context


def get_raw_body(request: Request) -> Optional[bytes]:
    """Raw body cached by the signature verifier, if it ran."""
    return get_auth_context(request).raw_body


def get_identity(request: Request) -> Optional[Any]:
    """Identity resolved by the delegated authorizer, if it ran."""
    return get_auth_context(request).identity


def require_identity(request: Request) -> Any:
    """
    Dependency that requires a resolved identity.
    Raises 401 if the authorizer did not attach one.
    """
    context = get_auth_context(request)
    if not context.has_identity:
        raise HTTPException(
            status_code=401,
            detail="This endpoint requires an authenticated identity",
        )
    return context.identity
