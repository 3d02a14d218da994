"""
Application root.

Runs the startup pipeline and the consent gate on behalf of the UI shell:
restore session -> ensure profile -> consent check, strictly in that order.
"""

import logging
from enum import Enum
from typing import Optional

from shared.exceptions import AuthenticationError
from modules.consent.models import GateState
from modules.profiles.models import Profile

from .boundary import ErrorBoundary
from .container import AppContainer

logger = logging.getLogger(__name__)


class AppState(str, Enum):
    """What the app shell should render."""

    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    CONSENT_REQUIRED = "consent_required"
    READY = "ready"
    EXITED = "exited"
    CRASHED = "crashed"


_GATE_TO_APP_STATE = {
    GateState.IDLE: AppState.UNAUTHENTICATED,
    GateState.CHECKING: AppState.LOADING,
    GateState.BLOCKED: AppState.CONSENT_REQUIRED,
    GateState.CLEAR: AppState.READY,
    GateState.EXITED: AppState.EXITED,
}


class AppRoot:
    """Owns the container and turns component states into one app state."""

    def __init__(self, container: AppContainer):
        self.container = container
        self.boundary = ErrorBoundary()
        self.state = AppState.LOADING

    async def start(self) -> AppState:
        """Restore any persisted session and bring the app to a usable state."""
        self.state = AppState.LOADING
        result = await self.boundary.run(self._start)
        if result is None:
            self.state = AppState.CRASHED
        return self.state

    async def _start(self) -> AppState:
        store = self.container.session_store
        identity = await store.restore_session()
        if identity is None:
            self.state = AppState.UNAUTHENTICATED
            return self.state

        profile = await self.container.provisioner.ensure_for_identity(identity)
        if profile is not None:
            store.set_username(profile.username)

        return await self._enter()

    async def enter_authenticated_area(self) -> AppState:
        """Called whenever an authenticated screen is about to render."""
        result = await self.boundary.run(self._enter)
        if result is None:
            self.state = AppState.CRASHED
        return self.state

    async def _enter(self) -> AppState:
        gate_state = await self.container.consent_gate.check()
        self.state = _GATE_TO_APP_STATE[gate_state]
        return self.state

    async def accept_terms(self) -> AppState:
        gate_state = await self.container.consent_gate.accept()
        self.state = _GATE_TO_APP_STATE[gate_state]
        return self.state

    async def decline_terms(self) -> AppState:
        gate_state = await self.container.consent_gate.decline()
        self.state = _GATE_TO_APP_STATE[gate_state]
        return self.state

    async def update_profile(
        self,
        username: Optional[str] = None,
        preferred_emoji: Optional[str] = None,
    ) -> Profile:
        """
        Save a profile edit for the signed-in user and mirror the new
        username into the session store.

        Raises:
            AuthenticationError: If nobody is signed in
            UsernameTakenError: If another profile holds ``username``
        """
        store = self.container.session_store
        identity = store.get_current_identity()
        if identity is None:
            raise AuthenticationError("Sign in to edit your profile")

        profile = await self.container.provisioner.update_profile(
            identity.id,
            username=username,
            preferred_emoji=preferred_emoji,
        )
        store.set_username(profile.username)
        return profile

    async def logout(self) -> AppState:
        """Sign out; the gate resets through the session store listener."""
        await self.container.session_store.clear_session()
        self.state = AppState.UNAUTHENTICATED
        return self.state

    async def try_again(self) -> AppState:
        """Reset the error boundary and rerun startup."""
        self.boundary.reset()
        return await self.start()
