"""
Bootstrap module.

Application root wiring: the injectable container, the startup pipeline and
the crash backstop.

Public API:
- AppContainer / build_container: Explicitly wired components
- AppRoot, AppState: Startup pipeline and resulting app state
- ErrorBoundary: Last-resort exception catcher
- configure_logging: Root logger setup from settings
"""

from .boundary import ErrorBoundary
from .container import (
    AppContainer,
    build_container,
    configure_logging,
    get_container,
    reset_container,
)
from .root import AppRoot, AppState

__all__ = [
    "AppContainer",
    "AppRoot",
    "AppState",
    "ErrorBoundary",
    "build_container",
    "configure_logging",
    "get_container",
    "reset_container",
]
