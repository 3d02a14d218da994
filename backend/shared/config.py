"""
Centralized configuration for the anonchat client core.

All settings are loaded from environment variables with sensible defaults.
Settings for external services are namespaced (e.g., SUPABASE_*, CALLBACK_*).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "anonchat"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""
    supabase_db_url: str = ""  # direct Postgres URI, used by run_migrations.py only

    # Session persistence (empty string keeps the session in memory only)
    session_storage_path: str = "~/.anonchat/session.json"

    # Deep link the magic-link e-mails point back to
    auth_redirect_url: str = "anonchat://auth/callback"

    # Terms of service version every user must have accepted
    terms_version: str = "1.0"

    # Callback screen timing, in seconds
    callback_success_delay: float = 1.5
    callback_error_delay: float = 2.0
    callback_redirect_delay: float = 1.0

    # Profile defaults
    default_username: str = "user"
    default_preferred_emoji: str = "🎭"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
