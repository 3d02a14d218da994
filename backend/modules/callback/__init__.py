"""
Callback module.

Handles inbound authentication redirects (magic links, OAuth).

Public API:
- AuthCallbackHandler: Redirect -> session -> profile -> landing
- normalize_callback / is_auth_link: Platform-independent redirect parsing
- INavigator: UI navigation seam
- UrlSource, ParamsSource, CallbackPayload, CallbackState, Route: Models
- CallbackError: Provider reported an error in the redirect
"""

from .interfaces import INavigator
from .models import (
    CallbackPayload,
    CallbackSource,
    CallbackState,
    ParamsSource,
    Route,
    UrlSource,
)
from .exceptions import CallbackError
from .normalizer import extract_param_from_url, is_auth_link, normalize_callback, sources_from
from .service import AuthCallbackHandler

__all__ = [
    # Interface
    "INavigator",
    # Implementations
    "AuthCallbackHandler",
    "normalize_callback",
    "extract_param_from_url",
    "is_auth_link",
    "sources_from",
    # Models
    "CallbackPayload",
    "CallbackSource",
    "CallbackState",
    "ParamsSource",
    "Route",
    "UrlSource",
    # Exceptions
    "CallbackError",
]
