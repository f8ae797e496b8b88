"""Delegated authorization against a remote identity service."""

from .authorizer import DelegatedAuthorizer
from .client import IdentityServiceClient
from .models import DelegatedCallResult

__all__ = [
    "DelegatedAuthorizer",
    "IdentityServiceClient",
    "DelegatedCallResult",
]
