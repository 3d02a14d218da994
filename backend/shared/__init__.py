"""
Shared infrastructure for the anonchat client core.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- storage: Session persistence backends for the Supabase auth client

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, get_supabase_admin_client, reset_client_cache
from .exceptions import (
    AnonChatError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    ExternalServiceError,
)
from .storage import FileSessionStorage

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "get_supabase_admin_client",
    "reset_client_cache",
    "AnonChatError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "ExternalServiceError",
    "FileSessionStorage",
]
