"""Tests for the cancelling fan-out helper."""

import asyncio

import pytest

from cgt_engine.utils.tasks import run_all


async def _value(v, delay=0.0):
    await asyncio.sleep(delay)
    return v


async def test_results_in_argument_order():
    assert await run_all(_value("a", 0.02), _value("b")) == ["a", "b"]


async def test_first_failure_propagates_unwrapped_and_cancels_rest():
    finished = []

    async def slow():
        await asyncio.sleep(0.2)
        finished.append(True)

    async def fail():
        raise KeyError("boom")

    with pytest.raises(KeyError):
        await run_all(slow(), fail())
    await asyncio.sleep(0.25)
    assert finished == []


async def test_empty():
    assert await run_all() == []
