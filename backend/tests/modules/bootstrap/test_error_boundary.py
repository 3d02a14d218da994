"""Tests for the crash backstop."""

import pytest

from modules.bootstrap.boundary import ErrorBoundary


class TestErrorBoundary:
    @pytest.mark.asyncio
    async def test_passes_result_through(self):
        boundary = ErrorBoundary()

        async def ok():
            return 42

        assert await boundary.run(ok) == 42
        assert boundary.has_error is False

    @pytest.mark.asyncio
    async def test_catches_and_trips(self):
        boundary = ErrorBoundary()

        async def broken():
            raise ValueError("bad state")

        assert await boundary.run(broken) is None
        assert boundary.has_error is True
        assert boundary.error == ErrorBoundary.FALLBACK_MESSAGE

    @pytest.mark.asyncio
    async def test_reset(self):
        boundary = ErrorBoundary()

        async def broken():
            raise ValueError("bad state")

        await boundary.run(broken)
        boundary.reset()

        assert boundary.has_error is False
        assert boundary.error is None
