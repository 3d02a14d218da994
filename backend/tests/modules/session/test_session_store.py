"""Tests for the Session Store."""

import pytest

from modules.session.exceptions import IdentityProviderError
from modules.session.models import AuthCredentials, AuthEvent
from modules.session.service import SessionStore
from tests.fakes import FakeIdentityProvider, make_session


class TestRestoreSession:
    @pytest.mark.asyncio
    async def test_no_prior_session_is_unauthenticated(self, session_store):
        """A fresh store with nothing persisted restores to signed out."""
        identity = await session_store.restore_session()

        assert identity is None
        assert session_store.is_authenticated is False
        assert session_store.get_current_identity() is None

    @pytest.mark.asyncio
    async def test_restores_persisted_session_on_new_store(self):
        """A session persisted by the provider survives a new store instance."""
        storage: dict = {}
        first_provider = FakeIdentityProvider(storage)
        first_provider.sessions_by_code["abc123"] = make_session(user_id="user-1")
        first_store = SessionStore(first_provider)
        session = await first_provider.resolve_session_from_credential(AuthCredentials(code="abc123"))
        established = first_store.establish_session(session)

        restarted = SessionStore(FakeIdentityProvider(storage))
        restored = await restarted.restore_session()

        assert restored is not None
        assert restored.id == established.id == "user-1"
        assert restarted.is_authenticated is True

    @pytest.mark.asyncio
    async def test_provider_failure_fails_closed(self, provider, session_store):
        """A network error during restore means signed out, not a crash."""
        provider.get_session_error = IdentityProviderError("offline", operation="get_session")

        identity = await session_store.restore_session()

        assert identity is None
        assert session_store.is_authenticated is False
        assert session_store.is_loading is False

    @pytest.mark.asyncio
    async def test_unexpected_failure_also_fails_closed(self, provider, session_store):
        """Even an unwrapped client error leaves the store signed out."""
        provider.get_session_error = ConnectionError("socket closed")

        assert await session_store.restore_session() is None
        assert session_store.is_authenticated is False


class TestEstablishSession:
    def test_populates_identity(self, session_store):
        """Establishing a session marks the store authenticated."""
        identity = session_store.establish_session(make_session(user_id="user-1", email="jane@x.com"))

        assert session_store.is_authenticated is True
        assert identity.id == "user-1"
        assert identity.username == "jane"
        assert session_store.get_current_identity() == identity

    def test_is_idempotent(self, session_store):
        """Establishing the same session twice yields the same state."""
        session = make_session()
        first = session_store.establish_session(session)
        second = session_store.establish_session(session)

        assert first == second
        assert session_store.session == session
        assert session_store.get_current_identity() == first

    def test_keeps_local_username_for_same_identity(self, session_store):
        """A token refresh for the same user does not undo a username edit."""
        session_store.establish_session(make_session(access_token="a1"))
        session_store.set_username("renamed")

        session_store.establish_session(make_session(access_token="a2"))

        assert session_store.get_current_identity().username == "renamed"
        assert session_store.session.access_token == "a2"

    def test_replaces_session_of_other_identity(self, session_store):
        """Only one session is active; a new user replaces the old one."""
        session_store.establish_session(make_session(user_id="user-1"))
        session_store.establish_session(make_session(user_id="user-2"))

        assert session_store.get_current_identity().id == "user-2"

    def test_notifies_listeners_on_identity_change(self, session_store):
        """Listeners hear about sign-in once per identity."""
        seen = []
        session_store.add_listener(seen.append)

        session_store.establish_session(make_session(user_id="user-1"))
        session_store.establish_session(make_session(user_id="user-1"))

        assert [i.id for i in seen] == ["user-1"]


class TestClearSession:
    @pytest.mark.asyncio
    async def test_clears_local_and_remote(self, provider, session_store):
        """Logout signs out remotely and forgets the identity."""
        session_store.establish_session(make_session())

        await session_store.clear_session()

        assert provider.sign_out_calls == 1
        assert session_store.get_current_identity() is None
        assert session_store.is_authenticated is False

    @pytest.mark.asyncio
    async def test_remote_failure_still_clears_local(self, provider, session_store):
        """Local state always wins when remote invalidation fails."""
        provider.sign_out_error = IdentityProviderError("offline", operation="sign_out")
        session_store.establish_session(make_session())

        await session_store.clear_session()

        assert session_store.get_current_identity() is None

    @pytest.mark.asyncio
    async def test_unexpected_sign_out_error_is_swallowed(self, provider, session_store):
        """Logout never raises, whatever the provider client throws."""
        provider.sign_out_error = RuntimeError("socket closed")
        session_store.establish_session(make_session())

        await session_store.clear_session()

        assert session_store.get_current_identity() is None

    @pytest.mark.asyncio
    async def test_notifies_listeners_with_none(self, session_store):
        """Listeners hear about sign-out."""
        seen = []
        session_store.establish_session(make_session())
        session_store.add_listener(seen.append)

        await session_store.clear_session()

        assert seen == [None]


class TestAuthEvents:
    def test_signed_in_establishes(self, session_store):
        session_store.apply_auth_event(AuthEvent.SIGNED_IN, make_session(user_id="user-9"))
        assert session_store.get_current_identity().id == "user-9"

    def test_token_refreshed_updates_session(self, session_store):
        session_store.establish_session(make_session(access_token="old"))
        session_store.apply_auth_event(AuthEvent.TOKEN_REFRESHED, make_session(access_token="new"))
        assert session_store.session.access_token == "new"

    def test_signed_out_clears_local_state(self, provider, session_store):
        """A provider-side sign-out clears the store without another remote call."""
        session_store.establish_session(make_session())
        session_store.apply_auth_event(AuthEvent.SIGNED_OUT, None)

        assert session_store.get_current_identity() is None
        assert provider.sign_out_calls == 0

    def test_other_events_are_ignored(self, session_store):
        session_store.apply_auth_event(AuthEvent.USER_UPDATED, make_session())
        assert session_store.get_current_identity() is None


class TestMagicLink:
    @pytest.mark.asyncio
    async def test_sends_link_with_redirect(self, provider, session_store):
        """The link points back at the app's callback deep link."""
        sent = await session_store.request_magic_link("jane@x.com", username="jane")

        assert sent is True
        assert provider.magic_links == [
            {"email": "jane@x.com", "redirect_to": "anonchat://auth/callback", "username": "jane"}
        ]
        assert session_store.verification_pending is True
        assert "jane@x.com" in session_store.success

    @pytest.mark.asyncio
    async def test_failure_sets_error(self, provider, session_store):
        provider.magic_link_error = IdentityProviderError("rate limited", operation="send_magic_link")

        sent = await session_store.request_magic_link("jane@x.com")

        assert sent is False
        assert session_store.error == "rate limited"
        assert session_store.verification_pending is False
        assert session_store.is_loading is False


class TestVerifyOtp:
    @pytest.mark.asyncio
    async def test_valid_code_signs_in(self, provider, session_store):
        provider.otp_codes[("jane@x.com", "123456")] = make_session(email="jane@x.com")
        await session_store.request_magic_link("jane@x.com")

        identity = await session_store.verify_otp("jane@x.com", " 123456 ")

        assert identity.username == "jane"
        assert session_store.get_current_identity().id == "user-123"
        assert session_store.verification_pending is False
        assert session_store.success == "Code verified successfully"
        assert provider.storage["session"].identity.id == "user-123"

    @pytest.mark.asyncio
    async def test_wrong_code_sets_error(self, provider, session_store):
        provider.otp_codes[("jane@x.com", "123456")] = make_session()

        identity = await session_store.verify_otp("jane@x.com", "000000")

        assert identity is None
        assert session_store.error == "Token has expired or is invalid"
        assert session_store.is_loading is False
        assert session_store.get_current_identity() is None
