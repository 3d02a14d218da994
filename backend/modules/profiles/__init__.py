"""
Profiles module.

Provisions and edits the application-level user profile.

Public API:
- ProfileProvisioner: Idempotent, race-safe profile creation and edits
- IProfileRepository / ProfileRepository: Row access for ``profiles``
- Profile, ProfileUpdate: Models
- Profile exceptions: DuplicateProfileError, UsernameTakenError, etc.
"""

from .interfaces import IProfileRepository
from .models import Profile, ProfileUpdate, DEFAULT_PREFERRED_EMOJI
from .exceptions import (
    DuplicateProfileError,
    ProfileStoreError,
    ProfileNotFoundError,
    UsernameTakenError,
)
from .repository import ProfileRepository
from .service import ProfileProvisioner

__all__ = [
    # Interface
    "IProfileRepository",
    # Implementations
    "ProfileRepository",
    "ProfileProvisioner",
    # Models
    "Profile",
    "ProfileUpdate",
    "DEFAULT_PREFERRED_EMOJI",
    # Exceptions
    "DuplicateProfileError",
    "ProfileStoreError",
    "ProfileNotFoundError",
    "UsernameTakenError",
]
