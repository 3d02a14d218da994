"""
Callback module exceptions.
"""

from shared.exceptions import AuthenticationError


class CallbackError(AuthenticationError):
    """Raised when the provider redirected back with an error."""

    def __init__(self, message: str):
        super().__init__(
            message,
            code="CALLBACK_ERROR",
            details={"provider_error": message},
        )
