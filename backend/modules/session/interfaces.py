"""
Session module interfaces.

Other modules should depend on these protocols, not on the Supabase-backed
implementations. This enables testing with in-memory fakes.
"""

from typing import Callable, Optional, Protocol, runtime_checkable

from .models import AuthCredentials, AuthEvent, Identity, Session


@runtime_checkable
class IIdentityProvider(Protocol):
    """
    The narrow slice of the identity provider the orchestration layer uses.

    Implementations raise IdentityProviderError for provider or network
    failures. Session persistence and token refresh happen inside the
    provider; callers never touch the persisted session.
    """

    async def get_session(self) -> Optional[Session]:
        """
        Return the currently valid session, if the provider has one.

        Returns:
            Session, or None when nobody is signed in

        Raises:
            IdentityProviderError: If the provider could not be reached
        """
        ...

    async def resolve_session_from_credential(
        self,
        credentials: AuthCredentials,
    ) -> Session:
        """
        Turn a callback credential into a live session.

        Args:
            credentials: Access/refresh token pair, refresh token, or
                one-time exchange code

        Returns:
            The resolved Session

        Raises:
            MissingCredentialError: If no usable credential is present
            SessionNotFoundError: If the provider returned no session
            IdentityProviderError: If the provider rejected the credential
        """
        ...

    async def sign_out(self) -> None:
        """
        Invalidate the current session with the provider.

        Raises:
            IdentityProviderError: If remote invalidation failed
        """
        ...

    async def send_magic_link(
        self,
        email: str,
        redirect_to: str,
        username: Optional[str] = None,
    ) -> None:
        """
        E-mail a passwordless sign-in link.

        Args:
            email: Address to send the link to
            redirect_to: Deep link the e-mail should open
            username: Stored in the account metadata on first sign-up
        """
        ...

    async def verify_otp(self, email: str, token: str) -> Session:
        """
        Exchange the one-time code from a sign-in e-mail for a session.

        Raises:
            SessionNotFoundError: If the provider returned no session
            IdentityProviderError: If the code was rejected
        """
        ...


IdentityListener = Callable[[Optional[Identity]], None]
AuthEventListener = Callable[[AuthEvent, Optional[Session]], None]
