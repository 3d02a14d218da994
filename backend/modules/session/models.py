"""
Session module data models.

These models define the identity and session shapes shared by every
orchestration component. They are independent of the
Supabase client types; the provider adapter maps between the two.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


DEFAULT_USERNAME = "user"


def derive_username(
    user_metadata: Optional[dict[str, Any]],
    email: Optional[str],
    default: str = DEFAULT_USERNAME,
) -> str:
    """
    Pick a display username for an identity.

    Preference order: explicit ``username`` in the account metadata, then the
    local part of the e-mail address, then ``default``.
    """
    if user_metadata:
        username = user_metadata.get("username")
        if isinstance(username, str) and username.strip():
            return username.strip()
    if email and "@" in email:
        local_part = email.split("@", 1)[0].strip()
        if local_part:
            return local_part
    return default


class Identity(BaseModel):
    """
    An authenticated end user as known to the identity provider.

    Only ``username`` may change locally (after a profile edit).
    """

    id: str = Field(..., description="User ID (UUID from Supabase Auth)")
    email: Optional[str] = Field(None, description="User's email address")
    username: str = Field(default=DEFAULT_USERNAME, description="Display username")
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class Session(BaseModel):
    """A live authentication grant for an Identity."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="Refresh token")
    expires_at: Optional[datetime] = Field(None, description="Access token expiry (UTC)")
    identity: Identity

    model_config = {"frozen": True}

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Whether the access token has passed its expiry."""
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at


class AuthCredentials(BaseModel):
    """
    Whatever credential an inbound authentication redirect carried.

    Any combination may be empty; the identity provider decides which one
    it can resolve into a session.
    """

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    code: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return not (self.access_token or self.refresh_token or self.code)


class AuthEvent(str, Enum):
    """Auth state changes reported by the identity provider."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
