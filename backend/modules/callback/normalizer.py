"""
Credential extraction for inbound authentication redirects.

This is the only place that knows how a redirect is shaped on each platform.
Everything downstream works with a CallbackPayload.
"""

from typing import Iterable, Optional, Union
from urllib.parse import parse_qs, urlsplit

from modules.session.models import AuthCredentials

from .models import CallbackPayload, CallbackSource, ParamsSource, UrlSource

CREDENTIAL_FIELDS = {
    "access_token": "access_token",
    "refresh_token": "refresh_token",
    "code": "code",
}

AUTH_LINK_MARKERS = (
    "/auth/v1/verify",
    "/auth/v1/callback",
    "/auth/callback",
    "access_token=",
    "refresh_token=",
    "code=",
    "type=recovery",
)


def is_auth_link(url: str) -> bool:
    """Whether a deep link is an authentication redirect."""
    return any(marker in url for marker in AUTH_LINK_MARKERS)


def extract_param_from_url(url: str, name: str) -> Optional[str]:
    """
    Read one parameter from a redirect URL.

    Implicit-flow providers put tokens in the fragment, PKCE providers put
    the code in the query string; the fragment is consulted first.
    """
    parts = urlsplit(url)
    for section in (parts.fragment, parts.query):
        if not section:
            continue
        # Fragments such as "#/callback?access_token=..." carry their own query
        if "?" in section and "=" not in section.split("?", 1)[0]:
            section = section.split("?", 1)[1]
        values = parse_qs(section, keep_blank_values=False).get(name)
        if values:
            return values[0]
    return None


def _first_value(value: Union[str, list[str], None]) -> Optional[str]:
    if isinstance(value, list):
        value = value[0] if value else None
    if value is None:
        return None
    value = value.strip()
    return value or None


def _read(source: CallbackSource, name: str) -> Optional[str]:
    if isinstance(source, ParamsSource):
        return _first_value(source.params.get(name))
    return extract_param_from_url(source.url, name)


def _pick(sources: list[CallbackSource], name: str) -> Optional[str]:
    for source in sources:
        value = _read(source, name)
        if value:
            return value
    return None


def _credentials_from(sources: list[CallbackSource]) -> AuthCredentials:
    return AuthCredentials(
        **{field: _pick(sources, param) for field, param in CREDENTIAL_FIELDS.items()}
    )


def normalize_callback(sources: Iterable[CallbackSource]) -> CallbackPayload:
    """
    Collapse every available redirect representation into one payload.

    Structured parameters win over URL parsing as a whole: when a parameter
    map carries any credential, the URL's credentials are ignored, so the
    two representations are never mixed into one triple.
    """
    sources = list(sources)
    params = [s for s in sources if isinstance(s, ParamsSource)]
    urls = [s for s in sources if not isinstance(s, ParamsSource)]

    credentials = _credentials_from(params)
    if credentials.is_empty:
        credentials = _credentials_from(urls)

    ordered = params + urls
    error = _pick(ordered, "error_description") or _pick(ordered, "error")
    return CallbackPayload(credentials=credentials, error=error)


def sources_from(
    url: Optional[str] = None,
    params: Optional[dict] = None,
) -> list[CallbackSource]:
    """Build the source list from whatever the platform handed over."""
    sources: list[CallbackSource] = []
    if params:
        sources.append(ParamsSource(params=params))
    if url:
        sources.append(UrlSource(url=url))
    return sources
