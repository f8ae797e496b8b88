"""
Signature Verification Middleware
=================================
Rejects inbound requests whose ``X-Signature`` does not match the HMAC of
their method, path, query and body.

The body is read once here and cached on the request's AuthContext; the
downstream app still receives the same bytes from ``request.body()``.

Usage:
    app.add_middleware(
        SignatureVerificationMiddleware,
        config=SignatureConfig(secret=settings.SIGNATURE_SECRET),
    )
"""

from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..config import SignatureConfig
from ..constants import X_SIGNATURE
from ..context import get_auth_context
from ..exceptions import (
    AuthError,
    BodyUnprocessableError,
    MissingSignatureError,
    SignatureMismatchError,
)
from ..responses import error_json_response
from ..signing import verify_signature

logger = structlog.get_logger(__name__)


class SignatureVerificationMiddleware(BaseHTTPMiddleware):
    """
    Middleware that verifies request signatures against a shared secret.

    With ``allow_unsigned_empty`` enabled, a request with no query string,
    no body and no signature header is let through unsigned. Off by default.
    """

    def __init__(
        self,
        app,
        config: Optional[SignatureConfig] = None,
        secret: Optional[str] = None,
        allow_unsigned_empty: bool = False,
    ):
        super().__init__(app)
        self.config = config or SignatureConfig(
            secret=secret or "",
            allow_unsigned_empty=allow_unsigned_empty,
        )
        if self.config.allow_unsigned_empty:
            logger.warning("signature_unsigned_empty_exemption_enabled")

    async def _read_body(self, request: Request) -> bytes:
        try:
            return await request.body()
        except Exception as e:
            logger.warning(
                "signature_body_unreadable",
                path=request.scope["path"],
                error_type=type(e).__name__,
            )
            raise BodyUnprocessableError() from e

    async def verify(self, request: Request) -> bytes:
        """
        Verify the request and return its cached body.

        Raises:
            MissingSignatureError, BodyUnprocessableError, SignatureMismatchError
        """
        # Decoded path; request.url truncates it at an encoded "?" or "#"
        path = request.scope["path"]
        provided_signature = request.headers.get(X_SIGNATURE, "")

        if not provided_signature:
            if self.config.allow_unsigned_empty and not request.query_params:
                body = await self._read_body(request)
                if not body:
                    logger.debug("signature_exempt_empty_request", method=request.method, path=path)
                    return body
            logger.warning("signature_missing", method=request.method, path=path)
            raise MissingSignatureError()

        body = await self._read_body(request)

        if not verify_signature(
            provided_signature,
            request.method,
            path,
            request.query_params,
            body,
            self.config.secret,
        ):
            logger.warning(
                "signature_mismatch",
                method=request.method,
                path=path,
                query_keys=sorted(request.query_params.keys()),
                body_size=len(body),
            )
            raise SignatureMismatchError()

        return body

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.scope["path"] in self.config.excluded_paths:
            return await call_next(request)

        try:
            body = await self.verify(request)
        except AuthError as e:
            return error_json_response(e)

        get_auth_context(request).set_raw_body(body)
        return await call_next(request)
