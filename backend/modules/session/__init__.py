"""
Session module.

Owns the live authentication session and the identity provider seam.

Public API:
- SessionStore: Injectable auth state container
- IIdentityProvider: Interface for the identity provider
- SupabaseIdentityProvider: Supabase Auth implementation
- Identity, Session, AuthCredentials, AuthEvent: Models
- Session exceptions: IdentityProviderError, SessionNotFoundError, etc.
"""

from .interfaces import IIdentityProvider
from .models import AuthCredentials, AuthEvent, Identity, Session, derive_username
from .exceptions import (
    IdentityProviderError,
    SessionNotFoundError,
    MissingCredentialError,
)
from .provider import SupabaseIdentityProvider
from .service import SessionStore

__all__ = [
    # Interface
    "IIdentityProvider",
    # Implementations
    "SessionStore",
    "SupabaseIdentityProvider",
    # Models
    "AuthCredentials",
    "AuthEvent",
    "Identity",
    "Session",
    "derive_username",
    # Exceptions
    "IdentityProviderError",
    "SessionNotFoundError",
    "MissingCredentialError",
]
