"""
Outer crash backstop.

Not part of the orchestration logic: it only keeps an unexpected exception
from taking the whole client down, logs it, and offers a "try again" reset.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorBoundary:
    """Catches whatever escaped the components and turns it into a message."""

    FALLBACK_MESSAGE = "Something went wrong. Please try again."

    def __init__(self) -> None:
        self.has_error = False
        self.error: Optional[str] = None

    async def run(self, operation: Callable[[], Awaitable[T]]) -> Optional[T]:
        """
        Await ``operation()``; on any exception log it and return None.

        The boundary stays tripped until reset() is called.
        """
        try:
            return await operation()
        except Exception as e:
            logger.exception(f"Unhandled error reached the error boundary: {e}")
            self.has_error = True
            self.error = self.FALLBACK_MESSAGE
            return None

    def reset(self) -> None:
        """The user pressed "try again"."""
        self.has_error = False
        self.error = None
