"""
Delegated Authorization Middleware
==================================
Forwards the caller's ``Authorization`` header to the identity service and
attaches the resolved identity to the request's AuthContext.

Must run after ``SignatureVerificationMiddleware``; use
``install_auth_middleware`` to get the order right.
"""

from typing import Optional, Set, Type

import httpx
import structlog
from pydantic import BaseModel
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Message, Receive, Scope, Send

from ..config import IdentityServiceConfig
from ..constants import APPLICATION_JSON, AUTHORIZATION
from ..context import get_auth_context
from ..exceptions import AuthError, ConfigurationError, UpstreamRejectedError
from ..identity import DelegatedAuthorizer
from ..responses import error_json_response

logger = structlog.get_logger(__name__)


class DelegatedAuthorizationMiddleware(BaseHTTPMiddleware):
    """
    Middleware that resolves the caller's identity via the identity service.

    - transport failure        -> 500 envelope
    - identity service non-200 -> remote status and body, unchanged
    - undecodable 200 body     -> 500 envelope

    With ``close_on_shutdown`` the authorizer's HTTP client is closed, and
    its in-flight workers awaited, when the app's lifespan shuts down.
    """

    def __init__(
        self,
        app,
        authorizer: Optional[DelegatedAuthorizer] = None,
        identity_model: Optional[Type[BaseModel]] = None,
        config: Optional[IdentityServiceConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        excluded_paths: Optional[Set[str]] = None,
        close_on_shutdown: Optional[bool] = None,
    ):
        super().__init__(app)
        owns_authorizer = authorizer is None
        if authorizer is None:
            if identity_model is None or config is None:
                raise ConfigurationError(
                    "DelegatedAuthorizationMiddleware needs an authorizer "
                    "or both identity_model and config"
                )
            authorizer = DelegatedAuthorizer(identity_model, config, client=client)
        self.authorizer = authorizer
        if excluded_paths is None:
            excluded_paths = set(authorizer.config.excluded_paths)
        self.excluded_paths = excluded_paths
        # An authorizer built here is closed with the app unless told otherwise
        if close_on_shutdown is None:
            close_on_shutdown = owns_authorizer
        self.close_on_shutdown = close_on_shutdown

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "lifespan" or not self.close_on_shutdown:
            await super().__call__(scope, receive, send)
            return

        async def send_wrapper(message: Message) -> None:
            if message["type"] in ("lifespan.shutdown.complete", "lifespan.shutdown.failed"):
                await self.authorizer.aclose()
                logger.info("identity_client_closed")
            await send(message)

        await self.app(scope, receive, send_wrapper)

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.scope["path"] in self.excluded_paths:
            return await call_next(request)

        token = request.headers.get(AUTHORIZATION)
        try:
            identity = await self.authorizer.authorize(token)
        except UpstreamRejectedError as e:
            return Response(
                content=e.payload,
                status_code=e.status_code,
                media_type=APPLICATION_JSON,
            )
        except AuthError as e:
            return error_json_response(e)

        get_auth_context(request).set_identity(identity)
        logger.debug("identity_attached", path=request.scope["path"])
        return await call_next(request)
