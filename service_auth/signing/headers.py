"""
Header Functions
================
Client-side helpers that attach a request signature.
"""

from typing import Dict, Generator, Optional

import httpx

from ..constants import X_SIGNATURE
from .canonical import QueryParams, generate_signature


def create_signed_headers(
    secret: str,
    method: str,
    path: str,
    query_params: QueryParams = None,
    body: Optional[bytes] = b"",
) -> Dict[str, str]:
    """
    Create headers for a signed request.

    Args:
        secret: Shared secret of the receiving service
        method: HTTP method
        path: Request path
        query_params: Query parameters sent with the request
        body: Request body (optional)

    Returns:
        Dictionary of headers to include in request
    """
    return {
        X_SIGNATURE: generate_signature(method, path, query_params, body, secret),
    }


class SignatureAuth(httpx.Auth):
    """
    httpx auth flow that signs every outgoing request.

    Usage:
        client = httpx.AsyncClient(auth=SignatureAuth(secret))
    """

    requires_request_body = True

    def __init__(self, secret: str):
        self.secret = secret

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers.update(
            create_signed_headers(
                self.secret,
                request.method,
                request.url.path,
                request.url.params,
                request.content,
            )
        )
        yield request
