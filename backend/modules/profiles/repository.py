"""
Profile repository for database access.

Encapsulates all Supabase queries and data mapping for the ``profiles`` table.
"""

from typing import Any, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from shared.repository import BaseRepository
from .exceptions import DuplicateProfileError, ProfileStoreError
from .interfaces import IProfileRepository
from .models import Profile, DEFAULT_PREFERRED_EMOJI


class ProfileRepository(BaseRepository[Profile], IProfileRepository):
    """
    Repository for profile data access.

    Reads go through the user client (RLS applies). Inserts go through the
    admin client when one is configured, so a fresh account can create its
    row before RLS policies recognize it.

    Methods are coroutines because the provisioner awaits every store call
    as a suspension point (IProfileRepository is async); the supabase-py
    `.execute()` underneath is synchronous.
    """

    TABLE = "profiles"

    def __init__(self, db: Client, admin_db: Optional[Client] = None) -> None:
        super().__init__(db)
        self._insert_db = admin_db or db

    async def find_by_id(self, user_id: str) -> Optional[Profile]:
        try:
            result = self._db.table(self.TABLE).select("*").eq("id", user_id).limit(1).execute()
        except (APIError, httpx.HTTPError) as e:
            raise ProfileStoreError(self.describe_error(e), operation="find_by_id") from e

        row = self.first_row(result.data)
        return self._map_to_profile(row) if row else None

    async def find_by_username(self, username: str) -> Optional[Profile]:
        try:
            result = (
                self._db.table(self.TABLE).select("*").eq("username", username).limit(1).execute()
            )
        except (APIError, httpx.HTTPError) as e:
            raise ProfileStoreError(self.describe_error(e), operation="find_by_username") from e

        row = self.first_row(result.data)
        return self._map_to_profile(row) if row else None

    async def insert(self, data: dict[str, Any]) -> Profile:
        try:
            result = self._insert_db.table(self.TABLE).insert(data).execute()
        except (APIError, httpx.HTTPError) as e:
            if self.is_unique_violation(e):
                raise DuplicateProfileError(data.get("id", "")) from e
            raise ProfileStoreError(self.describe_error(e), operation="insert") from e

        row = self.first_row(result.data)
        if row is None:
            raise ProfileStoreError("Insert returned no row", operation="insert")
        return self._map_to_profile(row)

    async def update(self, user_id: str, changes: dict[str, Any]) -> Optional[Profile]:
        try:
            result = self._db.table(self.TABLE).update(changes).eq("id", user_id).execute()
        except (APIError, httpx.HTTPError) as e:
            if self.is_unique_violation(e):
                raise DuplicateProfileError(user_id) from e
            raise ProfileStoreError(self.describe_error(e), operation="update") from e

        row = self.first_row(result.data)
        return self._map_to_profile(row) if row else None

    @staticmethod
    def _map_to_profile(data: dict[str, Any]) -> Profile:
        return Profile(
            id=str(data["id"]),
            username=data["username"],
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            preferred_emoji=data.get("preferred_emoji") or DEFAULT_PREFERRED_EMOJI,
        )
