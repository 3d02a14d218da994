"""
Profile module data models.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


DEFAULT_PREFERRED_EMOJI = "🎭"


class Profile(BaseModel):
    """
    The application's own user record, keyed 1:1 to an Identity.

    Username uniqueness is enforced by the backing table, not by the client.
    """

    id: str = Field(..., description="User ID (same as the Identity ID)")
    username: str = Field(..., description="Unique display username")
    created_at: Optional[datetime] = Field(None, description="Profile creation time")
    updated_at: Optional[datetime] = Field(None, description="Last update time")
    preferred_emoji: str = Field(default=DEFAULT_PREFERRED_EMOJI, description="Chat avatar emoji")


class ProfileUpdate(BaseModel):
    """User-initiated profile edit. Unset fields are left unchanged."""

    username: Optional[str] = Field(None, min_length=1, max_length=50)
    preferred_emoji: Optional[str] = Field(None, min_length=1, max_length=16)

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)
