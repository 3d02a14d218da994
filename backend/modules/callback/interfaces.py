"""
Callback module interfaces.
"""

from typing import Protocol, runtime_checkable

from .models import Route


@runtime_checkable
class INavigator(Protocol):
    """The UI seam the callback flow navigates through."""

    def replace(self, route: Route) -> None:
        """Replace the current screen with ``route`` (no back entry)."""
        ...
