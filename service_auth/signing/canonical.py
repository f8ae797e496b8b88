"""
Signature Functions
===================
Canonicalization and HMAC-SHA256 signing of HTTP requests.

The canonical string is::

    lower(method) & quote(path) & k1=v1&k2=v2& <body without spaces/newlines>

Query keys are sorted byte-wise; a repeated key keeps its last value. Every
space and newline is removed from the body, including those inside JSON
string values, so two payloads that differ only in whitespace sign the same.
"""

import hashlib
import hmac
from typing import Iterable, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import quote_plus

SIGNATURE_ALGORITHM = "sha256"

QueryParams = Union[
    Mapping[str, Union[str, Sequence[str]]],
    Iterable[Tuple[str, str]],
    None,
]


def collapse_query_params(params: QueryParams) -> dict:
    """
    Reduce query parameters to one value per key (last value wins).

    Accepts a plain mapping, a mapping of value lists (``parse_qs`` style),
    a Starlette/httpx multi-dict, or a sequence of ``(key, value)`` pairs.
    """
    if params is None:
        return {}

    # Starlette ImmutableMultiDict and httpx QueryParams
    multi_items = getattr(params, "multi_items", None)
    if callable(multi_items):
        return {str(k): str(v) for k, v in multi_items()}

    collapsed = {}
    if isinstance(params, Mapping):
        for key, value in params.items():
            if isinstance(value, (list, tuple)):
                if not value:
                    continue
                value = value[-1]
            collapsed[str(key)] = str(value)
        return collapsed

    for key, value in params:
        collapsed[str(key)] = str(value)
    return collapsed


def normalize_body(body: Optional[bytes]) -> bytes:
    """Strip every space and newline byte from the body."""
    if not body:
        return b""
    if isinstance(body, str):
        body = body.encode()
    return body.replace(b" ", b"").replace(b"\n", b"")


def canonical_string(
    method: str,
    path: str,
    query_params: QueryParams = None,
    body: Optional[bytes] = b"",
) -> bytes:
    """
    Build the exact byte string that gets signed.

    Args:
        method: HTTP method, any case
        path: Decoded request path (e.g. /v1/orders)
        query_params: Query parameters in any supported shape
        body: Raw request body

    Returns:
        Canonical bytes ready for the MAC
    """
    params = collapse_query_params(query_params)

    prefix = method.lower() + "&" + quote_plus(path, safe="") + "&"
    # Sorting is mandatory, otherwise the signature is not reproducible
    for key in sorted(params, key=lambda k: k.encode()):
        prefix += key + "=" + params[key] + "&"

    return prefix.encode() + normalize_body(body)


def generate_signature(
    method: str,
    path: str,
    query_params: QueryParams,
    body: Optional[bytes],
    secret: str,
) -> str:
    """
    Compute the lowercase hex HMAC-SHA256 signature for a request.

    Returns:
        64-character hex string
    """
    return hmac.new(
        secret.encode(),
        canonical_string(method, path, query_params, body),
        hashlib.sha256,
    ).hexdigest()


def verify_signature(
    provided_signature: str,
    method: str,
    path: str,
    query_params: QueryParams,
    body: Optional[bytes],
    secret: str,
) -> bool:
    """
    Verify a request signature using constant-time comparison.

    Returns:
        True if the provided signature matches
    """
    if not provided_signature:
        return False
    expected_signature = generate_signature(method, path, query_params, body, secret)
    return hmac.compare_digest(
        provided_signature.encode(),
        expected_signature.encode(),
    )
