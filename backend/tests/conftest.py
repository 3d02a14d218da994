"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import pytest
from datetime import datetime, timezone, timedelta
import jwt  # PyJWT

from shared.config import get_settings
from shared.database import reset_client_cache
from modules.bootstrap.container import reset_container
from modules.consent.service import ConsentGate
from modules.profiles.service import ProfileProvisioner
from modules.session.service import SessionStore

from tests.fakes import (
    FakeIdentityProvider,
    InMemoryConsentRepository,
    InMemoryProfileRepository,
    RecordingNavigator,
    RecordingSleep,
)


TEST_JWT_SECRET = "test-secret-key-for-testing-only"


def create_test_token(
    user_id: str = "test-user-123",
    email: str = "test@example.com",
    expired: bool = False,
) -> str:
    """
    Create an access token shaped like the ones Supabase Auth issues.

    Args:
        user_id: User ID to include in the token
        email: Email to include in the token
        expired: If True, creates an expired token

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
    }
    return jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached settings, clients and the app container around each test."""
    get_settings.cache_clear()
    reset_client_cache()
    reset_container()
    yield
    reset_container()
    reset_client_cache()
    get_settings.cache_clear()


@pytest.fixture
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def session_store(provider) -> SessionStore:
    return SessionStore(provider, auth_redirect_url="anonchat://auth/callback")


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def provisioner(profile_repository) -> ProfileProvisioner:
    return ProfileProvisioner(profile_repository)


@pytest.fixture
def consent_repository() -> InMemoryConsentRepository:
    return InMemoryConsentRepository()


@pytest.fixture
def exit_calls() -> list:
    return []


@pytest.fixture
def consent_gate(session_store, consent_repository, exit_calls) -> ConsentGate:
    return ConsentGate(
        session_store,
        consent_repository,
        terms_version="2.0",
        exit_app=lambda: exit_calls.append(True),
    )


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()
