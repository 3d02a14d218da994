"""
Profile module interfaces.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from .models import Profile


@runtime_checkable
class IProfileRepository(Protocol):
    """
    Row access for the ``profiles`` table.

    Implementations raise DuplicateProfileError on unique violations and
    ProfileStoreError for any other storage failure.
    """

    async def find_by_id(self, user_id: str) -> Optional[Profile]:
        """Return the profile with this ID, or None."""
        ...

    async def find_by_username(self, username: str) -> Optional[Profile]:
        """Return the profile holding this username, or None."""
        ...

    async def insert(self, data: dict[str, Any]) -> Profile:
        """Insert a new profile row and return it."""
        ...

    async def update(self, user_id: str, changes: dict[str, Any]) -> Optional[Profile]:
        """Apply ``changes`` to a profile; None if no row matched."""
        ...
