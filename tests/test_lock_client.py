"""Tests for the in-process named lock client."""
import asyncio

import pytest

from countryquiz.utils.exceptions import LockTimeoutError
from countryquiz.utils.lock_client import LockClient


@pytest.mark.asyncio
async def test_lock_times_out_and_is_released_afterwards():
    locks = LockClient()

    async with locks.lock("start_round:1"):
        assert locks.is_locked("start_round:1")
        with pytest.raises(LockTimeoutError):
            async with locks.lock("start_round:1", timeout=0.01):
                pass

    assert not locks.is_locked("start_round:1")
    assert locks._locks == {}

    async with locks.lock("start_round:1", timeout=0.01):
        assert locks.is_locked("start_round:1")


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_keep_lock():
    locks = LockClient()
    entered = []

    async def waiter():
        async with locks.lock("resolve_round:abc", timeout=5):
            entered.append(True)

    async with locks.lock("resolve_round:abc"):
        task = asyncio.create_task(waiter())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    assert entered == []
    assert not locks.is_locked("resolve_round:abc")

    async with locks.lock("resolve_round:abc", timeout=0.1):
        assert locks.is_locked("resolve_round:abc")
