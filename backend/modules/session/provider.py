"""
Supabase-backed identity provider.

Wraps the auth half of the Supabase client behind IIdentityProvider and maps
Supabase sessions onto the module's own Session/Identity models.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import httpx
import jwt
from supabase import AuthError, Client

from .exceptions import IdentityProviderError, MissingCredentialError, SessionNotFoundError
from .interfaces import AuthEventListener, IIdentityProvider
from .models import AuthCredentials, AuthEvent, Identity, Session, derive_username

logger = logging.getLogger(__name__)


def read_token_expiry(access_token: str) -> Optional[datetime]:
    """
    Read the ``exp`` claim of an access token.

    The client never holds the signing secret, so the signature is not
    verified here; the token is only inspected for its expiry.
    """
    try:
        claims = jwt.decode(access_token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None
    exp = claims.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(int(exp), tz=timezone.utc)


def map_identity(user: Any, default_username: str = "user") -> Identity:
    """Map a Supabase auth user onto an Identity."""
    metadata = dict(getattr(user, "user_metadata", None) or {})
    email = getattr(user, "email", None) or None
    return Identity(
        id=str(user.id),
        email=email,
        username=derive_username(metadata, email, default_username),
        user_metadata=metadata,
    )


def map_session(raw: Any, default_username: str = "user") -> Session:
    """Map a Supabase auth session onto a Session."""
    expires_at = None
    if getattr(raw, "expires_at", None):
        expires_at = datetime.fromtimestamp(int(raw.expires_at), tz=timezone.utc)
    else:
        expires_at = read_token_expiry(raw.access_token)

    return Session(
        access_token=raw.access_token,
        refresh_token=raw.refresh_token,
        expires_at=expires_at,
        identity=map_identity(raw.user, default_username),
    )


class SupabaseIdentityProvider(IIdentityProvider):
    """
    Identity provider backed by Supabase Auth.

    The wrapped client persists the session in its configured storage and
    refreshes tokens on its own, so this class keeps no state of its own.
    """

    def __init__(self, client: Client, default_username: str = "user"):
        self._auth = client.auth
        self._default_username = default_username

    async def get_session(self) -> Optional[Session]:
        """Return the provider's current session, restoring it from storage."""
        try:
            raw = self._auth.get_session()
        except (AuthError, httpx.HTTPError) as e:
            raise IdentityProviderError(str(e), operation="get_session") from e

        if raw is None:
            return None
        return map_session(raw, self._default_username)

    async def resolve_session_from_credential(
        self,
        credentials: AuthCredentials,
    ) -> Session:
        """
        Resolve a session from a callback credential.

        A one-time code takes precedence, then an access/refresh token pair,
        then a lone refresh token.
        """
        try:
            if credentials.code:
                logger.debug("Exchanging auth code for session")
                response = self._auth.exchange_code_for_session({"auth_code": credentials.code})
            elif credentials.access_token and credentials.refresh_token:
                logger.debug("Setting session from callback tokens")
                response = self._auth.set_session(
                    credentials.access_token,
                    credentials.refresh_token,
                )
            elif credentials.refresh_token:
                logger.debug("Refreshing session from callback refresh token")
                response = self._auth.refresh_session(credentials.refresh_token)
            else:
                raise MissingCredentialError()
        except (AuthError, httpx.HTTPError) as e:
            raise IdentityProviderError(str(e), operation="resolve_session") from e

        if response is None or response.session is None:
            raise SessionNotFoundError()
        return map_session(response.session, self._default_username)

    async def sign_out(self) -> None:
        """Sign out with the provider; the client also drops its stored session."""
        try:
            self._auth.sign_out()
        except (AuthError, httpx.HTTPError) as e:
            raise IdentityProviderError(str(e), operation="sign_out") from e

    async def send_magic_link(
        self,
        email: str,
        redirect_to: str,
        username: Optional[str] = None,
    ) -> None:
        """Send a passwordless sign-in e-mail pointing at ``redirect_to``."""
        options: dict[str, Any] = {"email_redirect_to": redirect_to}
        if username:
            options["data"] = {"username": username}

        try:
            self._auth.sign_in_with_otp({"email": email, "options": options})
        except (AuthError, httpx.HTTPError) as e:
            raise IdentityProviderError(str(e), operation="send_magic_link") from e

    async def verify_otp(self, email: str, token: str) -> Session:
        """Verify a 6-digit e-mail code and return the session it grants."""
        try:
            response = self._auth.verify_otp({"email": email, "token": token, "type": "email"})
        except (AuthError, httpx.HTTPError) as e:
            raise IdentityProviderError(str(e), operation="verify_otp") from e

        if response is None or response.session is None:
            raise SessionNotFoundError()
        return map_session(response.session, self._default_username)

    def subscribe(self, listener: AuthEventListener) -> Callable[[], None]:
        """
        Forward Supabase auth state changes to ``listener``.

        Returns:
            A callable that removes the subscription
        """

        def _forward(event: str, raw_session: Any) -> None:
            try:
                auth_event = AuthEvent(event)
            except ValueError:
                logger.debug(f"Ignoring unknown auth event: {event}")
                return
            session = map_session(raw_session, self._default_username) if raw_session else None
            listener(auth_event, session)

        subscription = self._auth.on_auth_state_change(_forward)
        return subscription.unsubscribe
