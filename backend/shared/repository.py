"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and the PostgREST error translation they share.
"""

from typing import TypeVar, Generic, Optional
from supabase import Client


T = TypeVar("T")

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class ProfileRepository(BaseRepository[Profile]):
            async def find_by_id(self, user_id: str) -> Optional[Profile]:
                result = self._db.table("profiles").select("*").eq("id", user_id).execute()
                if not result.data:
                    return None
                return self._map_to_profile(result.data[0])
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    @staticmethod
    def is_unique_violation(error: Exception) -> bool:
        """Whether a PostgREST error is a duplicate-key rejection."""
        return getattr(error, "code", None) == UNIQUE_VIOLATION

    @staticmethod
    def first_row(data: Optional[list]) -> Optional[dict]:
        """First row of a PostgREST result payload, or None when empty."""
        if not data:
            return None
        return data[0]

    @staticmethod
    def describe_error(error: Exception) -> str:
        """Human-readable message of a PostgREST error."""
        return getattr(error, "message", None) or str(error)
