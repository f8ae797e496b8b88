"""
Service Auth Core
=================
Signed inter-service requests and delegated authorization for ASGI services.
"""

__version__ = "0.1.0"

# Configuration
from service_auth.config import IdentityServiceConfig, SignatureConfig

# Signing
from service_auth.signing import (
    SignatureAuth,
    canonical_string,
    create_signed_headers,
    generate_signature,
    verify_signature,
)

# Context
from service_auth.context import (
    AuthContext,
    get_auth_context,
    get_identity,
    get_raw_body,
    require_identity,
)

# Errors
from service_auth.exceptions import (
    AuthError,
    BodyUnprocessableError,
    ConfigurationError,
    IdentityUndecodableError,
    MissingSignatureError,
    SignatureMismatchError,
    UpstreamRejectedError,
    UpstreamUnreachableError,
)

# Responses
from service_auth.responses import Response, error_json_response, error_response, success_response

# Delegated authorization
from service_auth.handoff import OneShot
from service_auth.identity import DelegatedAuthorizer, DelegatedCallResult, IdentityServiceClient

# Middleware
from service_auth.middleware import (
    DelegatedAuthorizationMiddleware,
    SignatureVerificationMiddleware,
    install_auth_middleware,
)

# Logging
from service_auth.logging_setup import setup_logging

__all__ = [
    "__version__",
    "IdentityServiceConfig",
    "SignatureConfig",
    "SignatureAuth",
    "canonical_string",
    "create_signed_headers",
    "generate_signature",
    "verify_signature",
    "AuthContext",
    "get_auth_context",
    "get_identity",
    "get_raw_body",
    "require_identity",
    "AuthError",
    "BodyUnprocessableError",
    "ConfigurationError",
    "IdentityUndecodableError",
    "MissingSignatureError",
    "SignatureMismatchError",
    "UpstreamRejectedError",
    "UpstreamUnreachableError",
    "Response",
    "error_json_response",
    "error_response",
    "success_response",
    "OneShot",
    "DelegatedAuthorizer",
    "DelegatedCallResult",
    "IdentityServiceClient",
    "DelegatedAuthorizationMiddleware",
    "SignatureVerificationMiddleware",
    "install_auth_middleware",
    "setup_logging",
]
