"""
Consent gate implementation.

Blocks every authenticated screen until the signed-in identity has accepted
the current terms version. Checking fails closed: any doubt means blocked.
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Callable, Optional

from modules.session.models import Identity
from modules.session.service import SessionStore

from .interfaces import IConsentRepository
from .models import ConsentRecord, GateState

logger = logging.getLogger(__name__)


def terminate_process() -> None:
    """Default decline action: end the application process."""
    sys.exit(0)


class ConsentGate:
    """
    Terms-of-service gate for the signed-in identity.

    States: ``checking`` -> ``blocked`` | ``clear``; ``blocked`` -> ``clear``
    on accept or the terminal ``exited`` on decline. Once clear, the gate
    does not query again until the identity changes.
    """

    def __init__(
        self,
        session_store: SessionStore,
        repository: IConsentRepository,
        terms_version: str,
        exit_app: Callable[[], None] = terminate_process,
    ):
        self._session_store = session_store
        self._repository = repository
        self._terms_version = terms_version
        self._exit_app = exit_app

        self._state = GateState.IDLE
        self._checked_user_id: Optional[str] = None
        self._generation = 0
        self._disposed = False

        self.terms_accepted = False
        self.privacy_accepted = False
        self.is_loading = False
        self.error: Optional[str] = None

        session_store.add_listener(self._on_identity_changed)

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def terms_version(self) -> str:
        return self._terms_version

    @property
    def is_blocking(self) -> bool:
        """Whether the modal must cover the app and swallow all input."""
        return self._state in (GateState.CHECKING, GateState.BLOCKED)

    @property
    def can_accept(self) -> bool:
        """The accept action is enabled only with both toggles on."""
        return (
            self._state == GateState.BLOCKED
            and self.terms_accepted
            and self.privacy_accepted
            and not self.is_loading
        )

    def set_terms_accepted(self, accepted: bool) -> None:
        self.terms_accepted = accepted

    def set_privacy_accepted(self, accepted: bool) -> None:
        self.privacy_accepted = accepted

    def handle_back_navigation(self) -> bool:
        """
        Route a hardware back press or back gesture through the gate.

        Returns:
            True if the gate consumed it (the app must not navigate)
        """
        if self.is_blocking:
            logger.debug("Back navigation swallowed by consent gate")
            return True
        return False

    async def check(self) -> GateState:
        """Decide whether the current identity may use the app."""
        if self._state == GateState.EXITED:
            return self._state

        identity = self._session_store.get_current_identity()
        if identity is None:
            self._reset(GateState.IDLE)
            return self._state

        if self._state == GateState.CLEAR and self._checked_user_id == identity.id:
            return self._state

        if self._checked_user_id != identity.id:
            self._reset(GateState.IDLE)
            self._checked_user_id = identity.id

        self._generation += 1
        generation = self._generation
        self._state = GateState.CHECKING
        self.is_loading = True

        try:
            record = await self._repository.find_by_user_id(identity.id)
        except Exception as e:
            if self._is_stale(generation):
                return self._state
            logger.warning(f"Consent check failed for {identity.id}, blocking: {e}")
            self.is_loading = False
            self._state = GateState.BLOCKED
            return self._state

        if self._is_stale(generation):
            logger.debug("Discarding stale consent check result")
            return self._state

        self.is_loading = False
        if record is not None and record.permits(self._terms_version):
            self._state = GateState.CLEAR
        else:
            if record is None:
                logger.debug(f"No consent record for {identity.id}")
            else:
                logger.debug(
                    f"Consent for {identity.id} is on version {record.version}, "
                    f"{self._terms_version} required"
                )
            self._state = GateState.BLOCKED
        return self._state

    async def accept(self) -> GateState:
        """
        Record acceptance of the current terms version.

        Does nothing unless the gate is blocked and both toggles are set. A
        failed save keeps the gate blocked with ``error`` set for a retry.
        """
        identity = self._session_store.get_current_identity()
        if identity is None or not self.can_accept:
            return self._state

        self._generation += 1
        generation = self._generation
        self.is_loading = True
        self.error = None

        record = ConsentRecord(
            user_id=identity.id,
            terms_accepted=True,
            privacy_accepted=True,
            accepted_at=datetime.now(timezone.utc),
            version=self._terms_version,
        )

        try:
            await self._repository.upsert(record)
        except Exception as e:
            if self._is_stale(generation):
                return self._state
            logger.error(f"Failed to save consent for {identity.id}: {e}")
            self.is_loading = False
            self.error = "Could not save your acceptance. Please try again."
            return self._state

        if self._is_stale(generation):
            return self._state

        self.is_loading = False
        self._state = GateState.CLEAR
        logger.info(f"User {identity.id} accepted terms version {self._terms_version}")
        return self._state

    async def decline(self) -> GateState:
        """Refuse the terms: sign out and end the process. Irreversible."""
        if self._state == GateState.EXITED:
            return self._state

        self._generation += 1
        self._state = GateState.EXITED
        logger.info("Terms declined, signing out and exiting")
        try:
            await self._session_store.clear_session()
        finally:
            self._exit_app()
        return self._state

    def dispose(self) -> None:
        """Detach from the session store; in-flight results are discarded."""
        self._disposed = True
        self._generation += 1
        self._session_store.remove_listener(self._on_identity_changed)

    def _is_stale(self, generation: int) -> bool:
        return self._disposed or generation != self._generation

    def _on_identity_changed(self, identity: Optional[Identity]) -> None:
        if self._state == GateState.EXITED:
            return
        if identity is None or identity.id != self._checked_user_id:
            self._generation += 1
            self._reset(GateState.IDLE)

    def _reset(self, state: GateState) -> None:
        self._state = state
        self._checked_user_id = None
        self.terms_accepted = False
        self.privacy_accepted = False
        self.is_loading = False
        self.error = None
