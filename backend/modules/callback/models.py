"""
Callback module data models.

An inbound authentication redirect reaches the app in one of two shapes:
as a raw URL (web) or as a parameter map the platform router has already
parsed (mobile). Both are modeled explicitly and normalized in one place.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field

from modules.session.models import AuthCredentials


class UrlSource(BaseModel):
    """A redirect delivered as a URL string."""

    kind: Literal["url"] = "url"
    url: str


class ParamsSource(BaseModel):
    """A redirect delivered as already-parsed route parameters."""

    kind: Literal["params"] = "params"
    params: dict[str, Union[str, list[str], None]] = Field(default_factory=dict)


CallbackSource = Annotated[Union[UrlSource, ParamsSource], Field(discriminator="kind")]


class CallbackPayload(BaseModel):
    """Everything the handler needs out of an inbound redirect."""

    credentials: AuthCredentials = Field(default_factory=AuthCredentials)
    error: Optional[str] = Field(None, description="Error reported by the provider")


class CallbackState(str, Enum):
    """What the callback screen is showing."""

    IDLE = "idle"
    PROCESSING = "processing"
    SUCCESS = "success"
    AUTHENTICATED = "authenticated"
    ERROR = "error"
    REDIRECTING = "redirecting"


class Route(str, Enum):
    """Screens the callback flow can hand over to."""

    LANDING = "/"
    LOGIN = "/login"
