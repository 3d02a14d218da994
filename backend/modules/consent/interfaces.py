"""
Consent module interfaces.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import ConsentRecord


@runtime_checkable
class IConsentRepository(Protocol):
    """
    Row access for the ``user_consent`` table.

    Implementations raise ConsentStoreError for any storage failure.
    """

    async def find_by_user_id(self, user_id: str) -> Optional[ConsentRecord]:
        """Return the user's consent record, or None if they never accepted."""
        ...

    async def upsert(self, record: ConsentRecord) -> ConsentRecord:
        """Insert or replace the record keyed on ``user_id``."""
        ...
