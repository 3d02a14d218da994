"""
Application container.

Builds the orchestration components once, at the application root, and
hands them around explicitly. Business logic never looks them up globally.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from shared.config import Settings, get_settings
from shared.database import get_supabase_admin_client, get_supabase_client
from modules.callback.interfaces import INavigator
from modules.callback.service import AuthCallbackHandler
from modules.consent.repository import ConsentRepository
from modules.consent.service import ConsentGate, terminate_process
from modules.profiles.repository import ProfileRepository
from modules.profiles.service import ProfileProvisioner
from modules.session.interfaces import IIdentityProvider
from modules.session.provider import SupabaseIdentityProvider
from modules.session.service import SessionStore

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Apply the configured log level to the root logger."""
    level = "DEBUG" if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@dataclass
class AppContainer:
    """Every long-lived orchestration component, wired together."""

    settings: Settings
    provider: IIdentityProvider
    session_store: SessionStore
    provisioner: ProfileProvisioner
    consent_gate: ConsentGate
    unsubscribers: list[Callable[[], None]] = field(default_factory=list)

    def make_callback_handler(self, navigator: INavigator) -> AuthCallbackHandler:
        """A fresh handler for one visit of the callback screen."""
        return AuthCallbackHandler(
            provider=self.provider,
            session_store=self.session_store,
            provisioner=self.provisioner,
            navigator=navigator,
            success_delay=self.settings.callback_success_delay,
            error_delay=self.settings.callback_error_delay,
            redirect_delay=self.settings.callback_redirect_delay,
        )

    def close(self) -> None:
        """Stop listening to provider events and detach the gate."""
        for unsubscribe in self.unsubscribers:
            unsubscribe()
        self.unsubscribers.clear()
        self.consent_gate.dispose()


def build_container(
    settings: Optional[Settings] = None,
    exit_app: Callable[[], None] = terminate_process,
) -> AppContainer:
    """Wire the Supabase-backed implementations."""
    settings = settings or get_settings()

    client = get_supabase_client()
    provider = SupabaseIdentityProvider(client, default_username=settings.default_username)
    session_store = SessionStore(provider, auth_redirect_url=settings.auth_redirect_url)

    provisioner = ProfileProvisioner(
        ProfileRepository(client, admin_db=get_supabase_admin_client()),
        default_username=settings.default_username,
        default_preferred_emoji=settings.default_preferred_emoji,
    )
    consent_gate = ConsentGate(
        session_store,
        ConsentRepository(client),
        terms_version=settings.terms_version,
        exit_app=exit_app,
    )

    container = AppContainer(
        settings=settings,
        provider=provider,
        session_store=session_store,
        provisioner=provisioner,
        consent_gate=consent_gate,
    )
    container.unsubscribers.append(provider.subscribe(session_store.apply_auth_event))
    logger.debug("Application container built")
    return container


# Module-level instance getter, for the application root only
_container_instance: Optional[AppContainer] = None


def get_container() -> AppContainer:
    """Get the application container singleton."""
    global _container_instance
    if _container_instance is None:
        settings = get_settings()
        configure_logging(settings)
        _container_instance = build_container(settings)
    return _container_instance


def reset_container() -> None:
    """Reset the application container singleton (for testing)."""
    global _container_instance
    if _container_instance is not None:
        _container_instance.close()
    _container_instance = None
