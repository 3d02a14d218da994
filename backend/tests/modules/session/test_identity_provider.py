"""Tests for the Supabase-backed identity provider."""

import pytest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx

from modules.session.exceptions import (
    IdentityProviderError,
    MissingCredentialError,
    SessionNotFoundError,
)
from modules.session.models import AuthCredentials, AuthEvent
from modules.session.provider import (
    SupabaseIdentityProvider,
    map_session,
    read_token_expiry,
)
from tests.conftest import create_test_token


def raw_user(user_id="user-123", email="jane@x.com", metadata=None):
    return SimpleNamespace(id=user_id, email=email, user_metadata=metadata or {})


def raw_session(expires_at=1_900_000_000, access_token="access", user=None):
    return SimpleNamespace(
        access_token=access_token,
        refresh_token="refresh",
        expires_at=expires_at,
        user=user or raw_user(),
    )


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def provider(client):
    return SupabaseIdentityProvider(client)


class TestMapping:
    def test_maps_session_fields(self):
        """Supabase sessions map onto Session/Identity."""
        session = map_session(raw_session(user=raw_user(metadata={"username": "janedoe"})))

        assert session.access_token == "access"
        assert session.refresh_token == "refresh"
        assert session.expires_at == datetime.fromtimestamp(1_900_000_000, tz=timezone.utc)
        assert session.identity.id == "user-123"
        assert session.identity.username == "janedoe"

    def test_username_falls_back_to_email(self):
        session = map_session(raw_session(user=raw_user(email="jane@x.com")))
        assert session.identity.username == "jane"

    def test_expiry_read_from_token_when_missing(self):
        """Without expires_at the access token's exp claim is used."""
        token = create_test_token()
        session = map_session(raw_session(expires_at=None, access_token=token))

        assert session.expires_at is not None
        assert session.is_expired() is False

    def test_read_token_expiry_of_garbage_is_none(self):
        assert read_token_expiry("not-a-jwt") is None

    def test_read_token_expiry_of_expired_token(self):
        expiry = read_token_expiry(create_test_token(expired=True))
        assert expiry is not None
        assert expiry < datetime.now(timezone.utc)


class TestGetSession:
    @pytest.mark.asyncio
    async def test_returns_none_without_session(self, client, provider):
        client.auth.get_session.return_value = None
        assert await provider.get_session() is None

    @pytest.mark.asyncio
    async def test_returns_mapped_session(self, client, provider):
        client.auth.get_session.return_value = raw_session()
        session = await provider.get_session()
        assert session.identity.id == "user-123"

    @pytest.mark.asyncio
    async def test_wraps_network_errors(self, client, provider):
        client.auth.get_session.side_effect = httpx.ConnectError("offline")
        with pytest.raises(IdentityProviderError):
            await provider.get_session()


class TestResolveSession:
    @pytest.mark.asyncio
    async def test_code_is_exchanged(self, client, provider):
        """A one-time code goes through the PKCE exchange."""
        client.auth.exchange_code_for_session.return_value = SimpleNamespace(session=raw_session())

        session = await provider.resolve_session_from_credential(AuthCredentials(code="abc123"))

        client.auth.exchange_code_for_session.assert_called_once_with({"auth_code": "abc123"})
        assert session.identity.id == "user-123"

    @pytest.mark.asyncio
    async def test_code_wins_over_tokens(self, client, provider):
        client.auth.exchange_code_for_session.return_value = SimpleNamespace(session=raw_session())

        await provider.resolve_session_from_credential(
            AuthCredentials(code="abc123", access_token="a", refresh_token="r")
        )

        client.auth.set_session.assert_not_called()

    @pytest.mark.asyncio
    async def test_token_pair_sets_session(self, client, provider):
        client.auth.set_session.return_value = SimpleNamespace(session=raw_session())

        await provider.resolve_session_from_credential(
            AuthCredentials(access_token="a", refresh_token="r")
        )

        client.auth.set_session.assert_called_once_with("a", "r")

    @pytest.mark.asyncio
    async def test_refresh_token_alone_refreshes(self, client, provider):
        client.auth.refresh_session.return_value = SimpleNamespace(session=raw_session())

        await provider.resolve_session_from_credential(AuthCredentials(refresh_token="r"))

        client.auth.refresh_session.assert_called_once_with("r")

    @pytest.mark.asyncio
    async def test_access_token_alone_is_not_enough(self, provider):
        with pytest.raises(MissingCredentialError):
            await provider.resolve_session_from_credential(AuthCredentials(access_token="a"))

    @pytest.mark.asyncio
    async def test_no_session_in_response(self, client, provider):
        client.auth.exchange_code_for_session.return_value = SimpleNamespace(session=None)
        with pytest.raises(SessionNotFoundError):
            await provider.resolve_session_from_credential(AuthCredentials(code="abc123"))

    @pytest.mark.asyncio
    async def test_wraps_provider_errors(self, client, provider):
        client.auth.exchange_code_for_session.side_effect = httpx.ReadTimeout("slow")
        with pytest.raises(IdentityProviderError) as exc_info:
            await provider.resolve_session_from_credential(AuthCredentials(code="abc123"))
        assert exc_info.value.details["operation"] == "resolve_session"


class TestSignOutAndMagicLink:
    @pytest.mark.asyncio
    async def test_sign_out(self, client, provider):
        await provider.sign_out()
        client.auth.sign_out.assert_called_once()

    @pytest.mark.asyncio
    async def test_sign_out_error_is_wrapped(self, client, provider):
        client.auth.sign_out.side_effect = httpx.ConnectError("offline")
        with pytest.raises(IdentityProviderError):
            await provider.sign_out()

    @pytest.mark.asyncio
    async def test_magic_link_carries_username(self, client, provider):
        await provider.send_magic_link("jane@x.com", "anonchat://auth/callback", username="jane")

        client.auth.sign_in_with_otp.assert_called_once_with({
            "email": "jane@x.com",
            "options": {
                "email_redirect_to": "anonchat://auth/callback",
                "data": {"username": "jane"},
            },
        })


class TestVerifyOtp:
    @pytest.mark.asyncio
    async def test_verifies_email_code(self, client, provider):
        client.auth.verify_otp.return_value = SimpleNamespace(session=raw_session())

        session = await provider.verify_otp("jane@x.com", "123456")

        client.auth.verify_otp.assert_called_once_with(
            {"email": "jane@x.com", "token": "123456", "type": "email"}
        )
        assert session.identity.username == "jane"

    @pytest.mark.asyncio
    async def test_no_session_in_response(self, client, provider):
        client.auth.verify_otp.return_value = SimpleNamespace(session=None)
        with pytest.raises(SessionNotFoundError):
            await provider.verify_otp("jane@x.com", "123456")

    @pytest.mark.asyncio
    async def test_rejected_code_is_wrapped(self, client, provider):
        client.auth.verify_otp.side_effect = httpx.ReadTimeout("slow")
        with pytest.raises(IdentityProviderError) as exc_info:
            await provider.verify_otp("jane@x.com", "000000")
        assert exc_info.value.details["operation"] == "verify_otp"


class TestSubscribe:
    def test_forwards_known_events(self, client, provider):
        """Supabase auth events reach the listener as AuthEvent + Session."""
        received = []
        provider.subscribe(lambda event, session: received.append((event, session)))
        forward = client.auth.on_auth_state_change.call_args.args[0]

        forward("SIGNED_IN", raw_session())
        forward("SIGNED_OUT", None)
        forward("MFA_CHALLENGE_VERIFIED", None)

        assert [event for event, _ in received] == [AuthEvent.SIGNED_IN, AuthEvent.SIGNED_OUT]
        assert received[0][1].identity.id == "user-123"
        assert received[1][1] is None

    def test_returns_unsubscribe(self, client, provider):
        unsubscribe = provider.subscribe(lambda event, session: None)
        unsubscribe()
        client.auth.on_auth_state_change.return_value.unsubscribe.assert_called_once()
