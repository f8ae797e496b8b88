from typing import Any, Optional


class AuthError(Exception):
    """Base exception for every terminal request-authentication failure."""

    status_code: int = 500
    code: str = "AUTH_ERROR"
    default_message: str = "authentication failed"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Any = None,
    ):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class MissingSignatureError(AuthError):
    """Raised when the signature header is absent and no exemption applies."""
    status_code = 400
    code = "MISSING_SIGNATURE"
    default_message = "missing signature"


class BodyUnprocessableError(AuthError):
    """Raised when the inbound body stream could not be fully read."""
    status_code = 422
    code = "BODY_UNPROCESSABLE"
    default_message = "request body could not be read"


class SignatureMismatchError(AuthError):
    """Raised when the supplied and computed signatures differ."""
    status_code = 400
    code = "SIGNATURE_MISMATCH"
    default_message = "signature mismatch"


class UpstreamUnreachableError(AuthError):
    """Raised when the identity service call did not complete."""
    status_code = 500
    code = "UPSTREAM_UNREACHABLE"
    default_message = "identity service unreachable"


class UpstreamRejectedError(AuthError):
    """
    Raised when the identity service answered with a non-OK status.

    The remote status and raw body are carried through unchanged so the
    caller sees the authoritative reason.
    """
    code = "UPSTREAM_REJECTED"
    default_message = "identity service rejected the credential"

    def __init__(self, status_code: int, payload: bytes = b""):
        self.payload = payload
        super().__init__(status_code=status_code)


class IdentityUndecodableError(AuthError):
    """Raised when a successful identity response cannot be parsed."""
    status_code = 500
    code = "IDENTITY_UNDECODABLE"
    default_message = "identity payload could not be decoded"


class ConfigurationError(Exception):
    """Raised at construction when required configuration is missing."""
    pass


class ContextAlreadySetError(RuntimeError):
    """Raised when a write-once request context slot is written twice."""
    pass


class HandoffError(RuntimeError):
    """Raised when the one-shot handoff is sent to or read more than once."""
    pass
