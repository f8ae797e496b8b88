"""
Shared Constants
================
Header names and request-state slots used across the auth layer.
"""

X_SIGNATURE = "X-Signature"
AUTHORIZATION = "Authorization"
CONTENT_TYPE = "Content-Type"
APPLICATION_JSON = "application/json"

# Attribute on request.state holding the typed AuthContext
AUTH_CONTEXT_STATE_KEY = "auth_context"

DEFAULT_IDENTITY_TIMEOUT_SECONDS = 5.0
