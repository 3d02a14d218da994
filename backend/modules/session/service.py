"""
Session Store implementation.

Single source of truth for whether anyone is signed in, and who. The store
owns the live Session exclusively; every other component reads it through
get_current_identity() and never mutates it.
"""

import logging
from typing import Optional

from shared.exceptions import AnonChatError

from .interfaces import IIdentityProvider, IdentityListener
from .models import AuthEvent, Identity, Session

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Injectable authentication state container.

    Created by the application root and passed explicitly to the callback
    handler, the profile provisioner and the consent gate.
    """

    def __init__(self, provider: IIdentityProvider, auth_redirect_url: str = ""):
        self._provider = provider
        self._auth_redirect_url = auth_redirect_url
        self._session: Optional[Session] = None
        self._identity: Optional[Identity] = None
        self._listeners: list[IdentityListener] = []

        # Display state for screens bound to the store
        self.is_loading: bool = False
        self.error: Optional[str] = None
        self.success: Optional[str] = None
        self.verification_pending: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    @property
    def session(self) -> Optional[Session]:
        return self._session

    def get_current_identity(self) -> Optional[Identity]:
        """Cached identity of the signed-in user, or None."""
        return self._identity

    def add_listener(self, listener: IdentityListener) -> None:
        """Be told whenever the signed-in identity changes (None on sign-out)."""
        self._listeners.append(listener)

    def remove_listener(self, listener: IdentityListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, identity: Optional[Identity]) -> None:
        for listener in list(self._listeners):
            listener(identity)

    async def restore_session(self) -> Optional[Identity]:
        """
        Ask the identity provider for a persisted session at startup.

        Any provider or network failure is treated as "not signed in"; the
        user is simply sent to the login flow.
        """
        self.is_loading = True
        try:
            session = await self._provider.get_session()
        except Exception as e:
            logger.warning(f"Session restore failed, continuing signed out: {e}")
            self._reset_local()
            return None
        finally:
            self.is_loading = False

        if session is None:
            logger.debug("No persisted session found")
            self._reset_local()
            return None

        return self.establish_session(session)

    def establish_session(self, session: Session) -> Identity:
        """
        Adopt a freshly obtained session as the one active session.

        Idempotent: re-establishing the same identity keeps the cached
        identity (including a locally edited username) untouched.
        """
        previous = self._identity
        self._session = session
        self.error = None
        self.verification_pending = False

        if previous is not None and previous.id == session.identity.id:
            logger.debug(f"Session re-established for user {previous.id}")
            return previous

        self._identity = session.identity
        logger.info(f"Session established for user {session.identity.id}")
        self._notify(self._identity)
        return self._identity

    async def clear_session(self) -> None:
        """
        Sign out. Remote invalidation errors are logged; local state is
        cleared regardless.
        """
        try:
            await self._provider.sign_out()
        except Exception as e:
            logger.warning(f"Remote sign-out failed, clearing local session anyway: {e}")
        finally:
            had_identity = self._identity is not None
            self._reset_local()
            if had_identity:
                logger.info("Session cleared")

    def set_username(self, username: str) -> None:
        """Update the cached identity's username after a profile edit."""
        if self._identity is None:
            return
        self._identity = self._identity.model_copy(update={"username": username})

    def apply_auth_event(self, event: AuthEvent, session: Optional[Session]) -> None:
        """Mirror an auth state change reported by the identity provider."""
        logger.debug(f"Auth event: {event.value}")
        if event in (AuthEvent.SIGNED_IN, AuthEvent.TOKEN_REFRESHED) and session is not None:
            self.establish_session(session)
        elif event == AuthEvent.SIGNED_OUT:
            self._reset_local()

    async def request_magic_link(self, email: str, username: Optional[str] = None) -> bool:
        """
        Ask the provider to e-mail a sign-in link.

        Returns:
            True if the e-mail was sent; otherwise ``error`` holds the reason
        """
        self.is_loading = True
        self.error = None
        self.success = None
        try:
            await self._provider.send_magic_link(email, self._auth_redirect_url, username)
        except AnonChatError as e:
            logger.error(f"Failed to send magic link: {e}")
            self.error = e.message or "Failed to send verification email. Please try again."
            return False
        finally:
            self.is_loading = False

        self.success = f"Verification email sent to {email}. Please check your inbox."
        self.verification_pending = True
        return True

    async def verify_otp(self, email: str, token: str) -> Optional[Identity]:
        """
        Sign in with the one-time code from the verification e-mail.

        Returns:
            The signed-in Identity, or None with ``error`` set
        """
        self.is_loading = True
        self.error = None
        self.success = None
        try:
            session = await self._provider.verify_otp(email, token.strip())
        except AnonChatError as e:
            logger.error(f"Failed to verify code for {email}: {e}")
            self.error = e.message or "Failed to verify code. Please try again."
            return None
        finally:
            self.is_loading = False

        identity = self.establish_session(session)
        self.success = "Code verified successfully"
        return identity

    def clear_messages(self) -> None:
        self.error = None
        self.success = None

    def _reset_local(self) -> None:
        had_identity = self._identity is not None
        self._session = None
        self._identity = None
        if had_identity:
            self._notify(None)
