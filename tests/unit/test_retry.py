"""Tests for retry with exponential backoff."""

import asyncio

import pytest

from cgt_engine.exceptions import ConfigurationError
from cgt_engine.utils.retry import backoff_delay, retry_async


class Flaky:
    def __init__(self, failures, exc=RuntimeError):
        self.failures = failures
        self.exc = exc
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc(f"failure {self.calls}")
        return "ok"


def _recorder():
    delays = []

    async def sleep(delay):
        delays.append(delay)

    return delays, sleep


def test_backoff_delay_doubles_and_caps():
    assert [backoff_delay(n) for n in (1, 2, 3, 4, 5)] == [1.0, 2.0, 4.0, 8.0, 10.0]
    assert backoff_delay(3, base_delay=0.5, max_delay=1.5) == 1.5


async def test_succeeds_after_transient_failures():
    delays, sleep = _recorder()
    fn = Flaky(2)
    assert await retry_async(fn, sleep=sleep) == "ok"
    assert fn.calls == 3
    assert delays == [1.0, 2.0]


async def test_exhausted_reraises_last_error():
    delays, sleep = _recorder()
    fn = Flaky(5)
    with pytest.raises(RuntimeError, match="failure 3"):
        await retry_async(fn, max_attempts=3, sleep=sleep)
    assert fn.calls == 3
    assert len(delays) == 2


async def test_configuration_error_not_retried():
    fn = Flaky(1, exc=ConfigurationError)
    with pytest.raises(ConfigurationError):
        await retry_async(fn, sleep=_recorder()[1])
    assert fn.calls == 1


async def test_retry_on_filters_exceptions():
    fn = Flaky(1, exc=KeyError)
    with pytest.raises(KeyError):
        await retry_async(fn, retry_on=(ConnectionError,), sleep=_recorder()[1])
    assert fn.calls == 1


async def test_timeout_counts_as_failed_attempt():
    calls = 0

    async def slow():
        nonlocal calls
        calls += 1
        if calls == 1:
            await asyncio.sleep(1)
        return "done"

    result = await retry_async(slow, timeout=0.01, sleep=_recorder()[1])
    assert result == "done"
    assert calls == 2


async def test_retry_if_rejection_stops_after_one_call():
    fn = Flaky(1, exc=ValueError)
    with pytest.raises(ValueError):
        await retry_async(fn, retry_if=lambda e: not isinstance(e, ValueError), sleep=_recorder()[1])
    assert fn.calls == 1


async def test_retry_if_acceptance_retries():
    fn = Flaky(1)
    assert await retry_async(fn, retry_if=lambda e: True, sleep=_recorder()[1]) == "ok"
    assert fn.calls == 2
