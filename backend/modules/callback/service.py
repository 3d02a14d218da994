"""
Auth callback handler.

Completes an authentication attempt that started outside the login screen
(magic-link e-mail, OAuth redirect): resolves the session, hands it to the
Session Store, provisions the profile and moves the UI on.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from shared.exceptions import AnonChatError
from modules.profiles.service import ProfileProvisioner
from modules.session.exceptions import SessionNotFoundError
from modules.session.interfaces import IIdentityProvider
from modules.session.models import AuthCredentials, Session
from modules.session.service import SessionStore

from .exceptions import CallbackError
from .interfaces import INavigator
from .models import CallbackState, Route
from .normalizer import normalize_callback, sources_from

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class AuthCallbackHandler:
    """
    Drives the callback screen from redirect to landing (or back to login).

    The steps run strictly in order: resolve session -> establish it ->
    ensure profile -> navigate. Nothing is retried; on failure the user sees
    the error and is sent back to login after a fixed delay.
    """

    def __init__(
        self,
        provider: IIdentityProvider,
        session_store: SessionStore,
        provisioner: ProfileProvisioner,
        navigator: INavigator,
        success_delay: float = 1.5,
        error_delay: float = 2.0,
        redirect_delay: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ):
        self._provider = provider
        self._session_store = session_store
        self._provisioner = provisioner
        self._navigator = navigator
        self._success_delay = success_delay
        self._error_delay = error_delay
        self._redirect_delay = redirect_delay
        self._sleep = sleep
        self._disposed = False

        self.state = CallbackState.IDLE
        self.message = ""
        self.error: Optional[str] = None
        self.failure: Optional[dict[str, Any]] = None

    def dispose(self) -> None:
        """The screen went away; pending results must not be applied."""
        self._disposed = True

    async def handle(
        self,
        url: Optional[str] = None,
        params: Optional[dict] = None,
    ) -> CallbackState:
        """
        Process one inbound redirect.

        Args:
            url: The redirect URL, where the platform exposes one
            params: Route parameters already parsed by the platform

        Returns:
            The state the screen ended in
        """
        self._session_store.clear_messages()
        self.state = CallbackState.PROCESSING
        self.message = "Processing authentication..."
        self.error = None
        self.failure = None

        try:
            payload = normalize_callback(sources_from(url=url, params=params))
            if payload.error:
                raise CallbackError(payload.error)

            session = await self._resolve(payload.credentials)
            if self._disposed:
                return self.state

            identity = self._session_store.establish_session(session)

            profile = await self._provisioner.ensure_for_identity(identity)
            if self._disposed:
                return self.state
        except AnonChatError as e:
            return await self._fail(e)
        except Exception as e:
            logger.exception(f"Unexpected error while handling auth callback: {e}")
            return await self._fail(CallbackError("Authentication failed"))

        if profile is not None:
            self._session_store.set_username(profile.username)
        else:
            logger.warning(f"Signed in {identity.id} without a profile; will retry on next launch")

        current = self._session_store.get_current_identity() or identity
        username = current.username
        self.state = CallbackState.SUCCESS
        self.message = f"Welcome, {username}!" if username else "Authentication successful!"

        # Let the provider client finish persisting the session first.
        await self._sleep(self._success_delay)
        if self._disposed:
            return self.state

        self._navigator.replace(Route.LANDING)
        self.state = CallbackState.AUTHENTICATED
        return self.state

    def go_to_login(self) -> None:
        """Manual escape from the error screen."""
        self._navigator.replace(Route.LOGIN)

    async def _resolve(self, credentials: AuthCredentials) -> Session:
        if not credentials.is_empty:
            return await self._provider.resolve_session_from_credential(credentials)

        # The provider client may already have consumed the redirect itself.
        logger.debug("Callback carried no credential, checking for an existing session")
        session = await self._provider.get_session()
        if session is None:
            raise SessionNotFoundError("No session found after exhausting all authentication methods")
        return session

    async def _fail(self, error: AnonChatError) -> CallbackState:
        self.failure = error.to_dict()
        logger.error(f"Auth callback failed: {self.failure}")
        self.state = CallbackState.ERROR
        self.error = error.message or "Authentication failed"
        self.message = ""

        await self._sleep(self._error_delay)
        if self._disposed:
            return self.state

        self.state = CallbackState.REDIRECTING
        self.message = "Redirecting to login..."
        await self._sleep(self._redirect_delay)
        if self._disposed:
            return self.state

        self._navigator.replace(Route.LOGIN)
        return self.state
