"""
Database client factory for Supabase.

Provides the user-facing client (anon key, respects RLS, owns the persisted
auth session) and an optional admin client (service role, bypasses RLS) used
only for profile inserts.
"""

import os
from typing import Optional
from supabase import create_client, Client, ClientOptions
from supabase_auth import SyncMemoryStorage, SyncSupportedStorage

from .config import get_settings
from .storage import FileSessionStorage

# Module-level client cache
_user_client: Optional[Client] = None
_admin_client: Optional[Client] = None


def build_session_storage(path: str) -> SyncSupportedStorage:
    """
    Pick the storage backend the auth client persists its session into.

    An empty path keeps the session in memory for the lifetime of the process.
    """
    if not path:
        return SyncMemoryStorage()
    return FileSessionStorage(os.path.expanduser(path))


def get_supabase_client() -> Client:
    """
    Get the Supabase client used by the app on behalf of the signed-in user.

    The auth half of this client is the identity provider: it persists the
    session into the configured storage, refreshes tokens on its own and
    exchanges PKCE codes delivered by magic links.

    Returns:
        Supabase client configured with the anon key
    """
    global _user_client

    if _user_client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_anon_key:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables."
            )
        _user_client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
            options=ClientOptions(
                storage=build_session_storage(settings.session_storage_path),
                persist_session=True,
                auto_refresh_token=True,
                flow_type="pkce",
            ),
        )

    return _user_client


def get_supabase_admin_client() -> Optional[Client]:
    """
    Get Supabase client with service role (bypasses RLS).

    Only configured deployments have one; callers fall back to the
    user client when this returns None.

    Returns:
        Supabase client configured with service role key, or None
    """
    global _admin_client

    settings = get_settings()
    if not settings.supabase_service_role_key:
        return None

    if _admin_client is None:
        if not settings.supabase_url:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY environment variables."
            )
        _admin_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
            options=ClientOptions(
                persist_session=False,
                auto_refresh_token=False,
            ),
        )

    return _admin_client


def reset_client_cache() -> None:
    """
    Reset the cached database clients.

    Useful for testing or when configuration changes.
    """
    global _user_client, _admin_client
    _user_client = None
    _admin_client = None
