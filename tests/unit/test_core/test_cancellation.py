"""Unit tests for CancellationToken."""
import asyncio

import pytest

from pricesnap.core.cancellation import CancellationToken
from pricesnap.errors import Cancelled


class TestCancellationToken:
    """Test suite for cooperative cancellation."""

    @pytest.mark.asyncio
    async def test_run_returns_result(self):
        async def work():
            await asyncio.sleep(0)
            return 42

        token = CancellationToken("test")
        assert await token.run(work()) == 42
        assert not token.cancelled

    @pytest.mark.asyncio
    async def test_run_propagates_errors(self):
        async def work():
            raise KeyError("boom")

        with pytest.raises(KeyError):
            await CancellationToken().run(work())

    @pytest.mark.asyncio
    async def test_cancelled_before_run(self):
        token = CancellationToken()
        token.cancel("user")

        with pytest.raises(Cancelled):
            await token.run(asyncio.sleep(10))
        assert token.reason == "user"

    @pytest.mark.asyncio
    async def test_cancel_while_waiting(self):
        token = CancellationToken()
        never = asyncio.Event()
        runner = asyncio.ensure_future(token.run(never.wait()))
        await asyncio.sleep(0)

        token.cancel()
        with pytest.raises(Cancelled):
            await asyncio.wait_for(runner, timeout=1)

    @pytest.mark.asyncio
    async def test_cancel_is_one_shot(self):
        token = CancellationToken()
        token.cancel("first")
        token.cancel("second")
        assert token.reason == "first"

    def test_raise_if_cancelled(self):
        token = CancellationToken()
        token.raise_if_cancelled()
        token.cancel()
        with pytest.raises(Cancelled):
            token.raise_if_cancelled()
