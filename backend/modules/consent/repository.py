"""
Consent repository for database access.

Encapsulates all Supabase queries and data mapping for the ``user_consent`` table.
"""

from typing import Any, Optional

import httpx
from postgrest.exceptions import APIError

from shared.repository import BaseRepository
from .exceptions import ConsentStoreError
from .interfaces import IConsentRepository
from .models import ConsentRecord


class ConsentRepository(BaseRepository[ConsentRecord], IConsentRepository):
    """
    Repository for consent records. One row per user, never deleted.

    Methods are coroutines because the consent gate awaits every store call
    and discards results that arrive after the identity changed
    (IConsentRepository is async); the supabase-py `.execute()` underneath
    is synchronous.
    """

    TABLE = "user_consent"

    async def find_by_user_id(self, user_id: str) -> Optional[ConsentRecord]:
        try:
            result = (
                self._db.table(self.TABLE)
                .select("user_id, terms_accepted, privacy_accepted, accepted_at, version")
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
        except (APIError, httpx.HTTPError) as e:
            raise ConsentStoreError(self.describe_error(e), operation="find_by_user_id") from e

        row = self.first_row(result.data)
        return self._map_to_record(row) if row else None

    async def upsert(self, record: ConsentRecord) -> ConsentRecord:
        data = record.model_dump(mode="json")
        try:
            result = self._db.table(self.TABLE).upsert(data, on_conflict="user_id").execute()
        except (APIError, httpx.HTTPError) as e:
            raise ConsentStoreError(self.describe_error(e), operation="upsert") from e

        row = self.first_row(result.data)
        return self._map_to_record(row) if row else record

    @staticmethod
    def _map_to_record(data: dict[str, Any]) -> ConsentRecord:
        return ConsentRecord(
            user_id=str(data["user_id"]),
            terms_accepted=bool(data.get("terms_accepted")),
            privacy_accepted=bool(data.get("privacy_accepted")),
            accepted_at=data["accepted_at"],
            version=data.get("version") or "",
        )
