"""
Profile module exceptions.
"""

from shared.exceptions import ExternalServiceError, NotFoundError, ValidationError


class DuplicateProfileError(ValidationError):
    """Raised when an insert hits the profiles unique constraints."""

    def __init__(self, user_id: str):
        super().__init__(
            f"Profile already exists: {user_id}",
            code="DUPLICATE_PROFILE",
            details={"user_id": user_id},
        )


class ProfileStoreError(ExternalServiceError):
    """Raised when the profiles table cannot be read or written."""

    def __init__(self, message: str, operation: str):
        super().__init__(
            message,
            service="supabase",
            code="PROFILE_STORE_ERROR",
            details={"operation": operation},
        )


class ProfileNotFoundError(NotFoundError):
    """Raised when editing a profile that does not exist."""

    def __init__(self, user_id: str):
        super().__init__(
            f"Profile not found: {user_id}",
            code="PROFILE_NOT_FOUND",
            details={"user_id": user_id},
        )


class UsernameTakenError(ValidationError):
    """Raised when a profile edit picks a username someone else holds."""

    def __init__(self, username: str):
        super().__init__(
            f"Username is already taken: {username}",
            code="USERNAME_TAKEN",
            details={"username": username},
        )
