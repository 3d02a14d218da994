"""
Consent module data models.
"""

from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field


class GateState(str, Enum):
    """Where the consent gate stands for the current identity."""

    IDLE = "idle"  # nobody signed in, gate not applicable
    CHECKING = "checking"
    BLOCKED = "blocked"
    CLEAR = "clear"
    EXITED = "exited"


class ConsentRecord(BaseModel):
    """A user's recorded acceptance of the terms and privacy policy."""

    user_id: str = Field(..., description="Identity ID (primary key)")
    terms_accepted: bool = Field(default=False)
    privacy_accepted: bool = Field(default=False)
    accepted_at: datetime = Field(..., description="When consent was given")
    version: str = Field(..., description="Terms version that was accepted")

    def permits(self, required_version: str) -> bool:
        """Whether this record grants access under ``required_version``."""
        return self.terms_accepted and self.privacy_accepted and self.version == required_version
