"""
Delegated Authorizer
====================
Validates a bearer credential by asking the identity service and maps the
single call result onto an identity or a terminal ``AuthError``.
"""

from typing import Generic, Optional, Type, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from ..config import IdentityServiceConfig
from ..exceptions import (
    IdentityUndecodableError,
    UpstreamRejectedError,
    UpstreamUnreachableError,
)
from .client import IdentityServiceClient
from .models import DelegatedCallResult

T = TypeVar("T", bound=BaseModel)

logger = structlog.get_logger(__name__)


class DelegatedAuthorizer(Generic[T]):
    """
    Resolves ``Authorization`` tokens into identities of type ``T``.

    Usage:
        authorizer = DelegatedAuthorizer(User, IdentityServiceConfig.from_env())
        user = await authorizer.authorize(request.headers.get("Authorization"))
    """

    def __init__(
        self,
        identity_model: Type[T],
        config: IdentityServiceConfig,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.identity_model = identity_model
        self.identity_client = IdentityServiceClient(config, client=client)

    @property
    def config(self) -> IdentityServiceConfig:
        return self.identity_client.config

    async def aclose(self):
        await self.identity_client.aclose()

    def resolve(self, result: DelegatedCallResult) -> T:
        """Map one call result onto an identity or raise."""
        if result.error is not None:
            logger.error(
                "identity_service_unreachable",
                url=self.config.url,
                error_type=type(result.error).__name__,
            )
            raise UpstreamUnreachableError(details=str(result.error) or None) from result.error

        if result.status_code != 200:
            logger.info(
                "identity_service_rejected",
                url=self.config.url,
                status_code=result.status_code,
            )
            raise UpstreamRejectedError(result.status_code, result.payload)

        try:
            return self.identity_model.model_validate_json(result.payload)
        except ValidationError as e:
            logger.error(
                "identity_payload_undecodable",
                url=self.config.url,
                error_count=e.error_count(),
            )
            raise IdentityUndecodableError() from e

    async def authorize(self, token: Optional[str]) -> T:
        """
        Resolve a bearer token into an identity.

        Raises:
            UpstreamUnreachableError: transport or build failure
            UpstreamRejectedError: identity service answered non-200
            IdentityUndecodableError: 200 body does not fit the identity model
        """
        result = await self.identity_client.call(token)
        return self.resolve(result)
