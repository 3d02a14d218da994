"""
Profile provisioning service.

Guarantees that every authenticated identity has exactly one profile row,
and handles user-initiated profile edits.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from modules.session.models import Identity, derive_username

from .exceptions import (
    DuplicateProfileError,
    ProfileNotFoundError,
    ProfileStoreError,
    UsernameTakenError,
)
from .interfaces import IProfileRepository
from .models import Profile, ProfileUpdate, DEFAULT_PREFERRED_EMOJI

logger = logging.getLogger(__name__)


class ProfileProvisioner:
    """
    Check-then-insert profile creation that is safe under duplicate attempts.

    A client-side callback and a server-side signup trigger may both try to
    create the same profile. The loser of that race gets a unique violation,
    re-reads the winner's row and returns it; the conflict is never surfaced.
    """

    def __init__(
        self,
        repository: IProfileRepository,
        default_username: str = "user",
        default_preferred_emoji: str = DEFAULT_PREFERRED_EMOJI,
    ):
        self._repository = repository
        self._default_username = default_username
        self._default_preferred_emoji = default_preferred_emoji

    def fallback_username(self, identity: Identity) -> str:
        """Username for a brand-new profile of ``identity``."""
        return derive_username(identity.user_metadata, identity.email, self._default_username)

    async def ensure_for_identity(self, identity: Identity) -> Optional[Profile]:
        """Ensure a profile for ``identity`` using its derived username."""
        return await self.ensure(identity.id, self.fallback_username(identity))

    async def ensure(self, user_id: str, fallback_username: str) -> Optional[Profile]:
        """
        Return the profile for ``user_id``, creating it if absent.

        Args:
            user_id: Identity ID the profile is keyed on
            fallback_username: Username to give a newly created profile

        Returns:
            The existing or newly created Profile, or None if neither the
            lookup nor the insert worked for a reason other than duplication
        """
        try:
            existing = await self._repository.find_by_id(user_id)
        except ProfileStoreError as e:
            # Fall through to the insert; a conflict there re-reads the row.
            logger.warning(f"Profile lookup failed for {user_id}, attempting insert: {e}")
            existing = None

        if existing is not None:
            logger.debug(f"Profile already exists for {user_id}")
            return existing

        now = datetime.now(timezone.utc).isoformat()
        data = {
            "id": user_id,
            "username": fallback_username or self._default_username,
            "created_at": now,
            "updated_at": now,
            "preferred_emoji": self._default_preferred_emoji,
        }

        try:
            profile = await self._repository.insert(data)
        except DuplicateProfileError:
            logger.debug(f"Profile for {user_id} was created concurrently, re-reading it")
            return await self._reread_after_conflict(user_id, data["username"])
        except ProfileStoreError as e:
            logger.error(f"Failed to create profile for {user_id}: {e}")
            return None

        logger.info(f"Created profile for {user_id} with username {profile.username}")
        return profile

    async def _reread_after_conflict(self, user_id: str, intended_username: str) -> Optional[Profile]:
        try:
            profile = await self._repository.find_by_id(user_id)
        except ProfileStoreError as e:
            logger.error(f"Failed to re-read profile for {user_id} after conflict: {e}")
            return None

        if profile is None:
            # The conflict was on the username, not on the ID.
            logger.error(f"Profile insert for {user_id} conflicted but no row exists")
            return None

        if profile.username != intended_username:
            logger.debug(
                f"Concurrent profile for {user_id} kept username {profile.username} "
                f"instead of {intended_username}"
            )
        return profile

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        """Read a profile; storage errors are logged and reported as None."""
        try:
            return await self._repository.find_by_id(user_id)
        except ProfileStoreError as e:
            logger.error(f"Error getting profile for {user_id}: {e}")
            return None

    async def is_username_available(self, username: str) -> bool:
        """Whether nobody holds ``username``. Errors count as unavailable."""
        try:
            return await self._repository.find_by_username(username) is None
        except ProfileStoreError as e:
            logger.error(f"Error checking username availability: {e}")
            return False

    async def update_profile(
        self,
        user_id: str,
        username: Optional[str] = None,
        preferred_emoji: Optional[str] = None,
    ) -> Profile:
        """
        Apply a user-initiated profile edit.

        Raises:
            UsernameTakenError: If another profile holds ``username``
            ProfileNotFoundError: If ``user_id`` has no profile
            ProfileStoreError: If the update could not be written
        """
        update = ProfileUpdate(username=username, preferred_emoji=preferred_emoji)
        changes = update.changes()
        if not changes:
            profile = await self._repository.find_by_id(user_id)
            if profile is None:
                raise ProfileNotFoundError(user_id)
            return profile

        changes["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            profile = await self._repository.update(user_id, changes)
        except DuplicateProfileError as e:
            raise UsernameTakenError(username or "") from e

        if profile is None:
            raise ProfileNotFoundError(user_id)

        logger.info(f"Updated profile for {user_id}: {sorted(update.changes())}")
        return profile
