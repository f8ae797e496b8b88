"""
Auth Configuration
==================
Explicit configuration for the signature verifier and delegated authorizer.

Nothing here is read at import time; the composition root builds these
objects (directly or via ``from_env``) and hands them to the middlewares.
"""

import os
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from .constants import DEFAULT_IDENTITY_TIMEOUT_SECONDS
from .exceptions import ConfigurationError


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class SignatureConfig:
    """Configuration for inbound signature verification."""

    secret: str
    # Let requests with no query, no body and no header through unsigned.
    allow_unsigned_empty: bool = False
    excluded_paths: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not self.secret:
            raise ConfigurationError("signature secret must not be empty")

    @classmethod
    def from_env(cls) -> "SignatureConfig":
        return cls(
            secret=os.getenv("SIGNATURE_SECRET", ""),
            allow_unsigned_empty=_env_flag("SIGNATURE_ALLOW_UNSIGNED_EMPTY"),
        )


@dataclass(frozen=True)
class IdentityServiceConfig:
    """Configuration for the delegated identity-service call."""

    url: str
    secret: str
    timeout: float = DEFAULT_IDENTITY_TIMEOUT_SECONDS
    excluded_paths: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not self.url:
            raise ConfigurationError("identity service url must not be empty")
        if not self.secret:
            raise ConfigurationError("identity service secret must not be empty")
        if self.timeout <= 0:
            raise ConfigurationError("identity service timeout must be positive")

    @classmethod
    def from_env(cls, timeout: Optional[float] = None) -> "IdentityServiceConfig":
        secret = os.getenv("IDENTITY_SERVICE_SECRET") or os.getenv("SIGNATURE_SECRET", "")
        if timeout is None:
            raw_timeout = os.getenv("IDENTITY_SERVICE_TIMEOUT", "")
            try:
                timeout = float(raw_timeout) if raw_timeout else DEFAULT_IDENTITY_TIMEOUT_SECONDS
            except ValueError as e:
                raise ConfigurationError(
                    f"IDENTITY_SERVICE_TIMEOUT is not a number: {raw_timeout!r}"
                ) from e
        return cls(
            url=os.getenv("IDENTITY_SERVICE_URL", ""),
            secret=secret,
            timeout=timeout,
        )
