"""
Request Signing
===============
Deterministic HMAC request signatures for inter-service calls.
"""

from .canonical import (
    SIGNATURE_ALGORITHM,
    QueryParams,
    canonical_string,
    collapse_query_params,
    generate_signature,
    normalize_body,
    verify_signature,
)
from .headers import SignatureAuth, create_signed_headers

__all__ = [
    "SIGNATURE_ALGORITHM",
    "QueryParams",
    "canonical_string",
    "collapse_query_params",
    "generate_signature",
    "normalize_body",
    "verify_signature",
    "SignatureAuth",
    "create_signed_headers",
]
