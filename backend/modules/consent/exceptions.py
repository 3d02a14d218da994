"""
Consent module exceptions.
"""

from shared.exceptions import ExternalServiceError


class ConsentStoreError(ExternalServiceError):
    """Raised when the user_consent table cannot be read or written."""

    def __init__(self, message: str, operation: str):
        super().__init__(
            message,
            service="supabase",
            code="CONSENT_STORE_ERROR",
            details={"operation": operation},
        )
