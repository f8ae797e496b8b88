"""
Auth Middleware
===============
Signature verification and delegated authorization for Starlette/FastAPI.
"""

from typing import Optional

from starlette.applications import Starlette

from ..config import SignatureConfig
from ..identity import DelegatedAuthorizer
from .authorization import DelegatedAuthorizationMiddleware
from .signature import SignatureVerificationMiddleware


def install_auth_middleware(
    app: Starlette,
    signature_config: SignatureConfig,
    authorizer: Optional[DelegatedAuthorizer] = None,
    close_on_shutdown: bool = True,
) -> None:
    """
    Add the verifier and, optionally, the authorizer in the right order.

    Starlette runs the last-added middleware first, so the authorizer is
    added before the verifier to make the verifier the outer layer. With
    ``close_on_shutdown`` the authorizer is closed when the app shuts down;
    pass False when the caller closes it from its own lifespan.

    Example:
        authorizer = DelegatedAuthorizer(User, IdentityServiceConfig.from_env())
        install_auth_middleware(app, SignatureConfig.from_env(), authorizer)
    """
    if authorizer is not None:
        app.add_middleware(
            DelegatedAuthorizationMiddleware,
            authorizer=authorizer,
            close_on_shutdown=close_on_shutdown,
        )
    app.add_middleware(SignatureVerificationMiddleware, config=signature_config)


__all__ = [
    "DelegatedAuthorizationMiddleware",
    "SignatureVerificationMiddleware",
    "install_auth_middleware",
]
