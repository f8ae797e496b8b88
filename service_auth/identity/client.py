"""
Identity Service Client
=======================
Signed GET against the identity service, run on a dedicated asyncio task
per call. The task hands its single result back through a ``OneShot``.
"""

import asyncio
from typing import Optional, Set

import httpx
import structlog

from ..config import IdentityServiceConfig
from ..constants import APPLICATION_JSON, AUTHORIZATION, CONTENT_TYPE
from ..handoff import OneShot
from ..signing import create_signed_headers
from .models import DelegatedCallResult

logger = structlog.get_logger(__name__)


class IdentityServiceClient:
    """
    Async client for the identity service.

    Features:
    - Outbound request signed with the identity service's shared secret
    - One worker task per call, result delivered exactly once
    - Bounded only by the httpx client timeout (no cooperative cancellation)
    """

    def __init__(
        self,
        config: IdentityServiceConfig,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self._client = client
        self._owns_client = client is None
        self._inflight: Set[asyncio.Task] = set()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    async def aclose(self):
        """Wait for in-flight workers, then close an owned HTTP client."""
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        self._get_client()
        return self

    async def __aexit__(self, *args):
        await self.aclose()

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    def build_request(self, token: Optional[str]) -> httpx.Request:
        """Build the signed validation request carrying the caller's token."""
        client = self._get_client()
        headers = {CONTENT_TYPE: APPLICATION_JSON}
        if token:
            headers[AUTHORIZATION] = token

        request = client.build_request("GET", self.config.url, headers=headers)
        # The validation call is signed with no query and no body
        request.headers.update(
            create_signed_headers(self.config.secret, request.method, request.url.path)
        )
        return request

    async def _worker(self, token: Optional[str], handoff: OneShot) -> None:
        try:
            request = self.build_request(token)
            response = await self._get_client().send(request)
            result = DelegatedCallResult(
                status_code=response.status_code,
                payload=response.content,
            )
        except asyncio.CancelledError as e:
            handoff.send(DelegatedCallResult(error=e))
            raise
        except httpx.HTTPError as e:
            logger.warning(
                "identity_service_transport_error",
                url=self.config.url,
                error_type=type(e).__name__,
                error=str(e),
            )
            result = DelegatedCallResult(error=e)
        except Exception as e:
            logger.exception("identity_service_request_failed", url=self.config.url)
            result = DelegatedCallResult(error=e)

        handoff.send(result)

    def dispatch(self, token: Optional[str]) -> OneShot:
        """
        Start the identity call on its own task.

        Returns:
            OneShot that will carry exactly one DelegatedCallResult
        """
        handoff: OneShot = OneShot()
        task = asyncio.create_task(self._worker(token, handoff))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return handoff

    async def call(self, token: Optional[str]) -> DelegatedCallResult:
        """Dispatch the call and wait for its single result."""
        return await self.dispatch(token).receive()
