"""
Session module exceptions.

Raised by the identity provider adapter; caught by the Session Store and
the Callback Handler at the boundary of each operation.
"""

from shared.exceptions import AuthenticationError, ExternalServiceError


class IdentityProviderError(ExternalServiceError):
    """Raised when the identity provider fails or cannot be reached."""

    def __init__(self, message: str, operation: str):
        super().__init__(
            message,
            service="supabase_auth",
            code="IDENTITY_PROVIDER_ERROR",
            details={"operation": operation},
        )


class SessionNotFoundError(AuthenticationError):
    """Raised when an authentication attempt ends without a session."""

    def __init__(self, message: str = "No session found after authentication"):
        super().__init__(message, code="SESSION_NOT_FOUND")


class MissingCredentialError(AuthenticationError):
    """Raised when a callback carried nothing the provider can resolve."""

    def __init__(self, message: str = "No usable authentication credential"):
        super().__init__(message, code="MISSING_CREDENTIAL")
