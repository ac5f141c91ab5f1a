"""Retry-with-backoff for network-calling collaborators."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from cgt_engine.exceptions import ConfigurationError
from cgt_engine.observability.logger import get_logger

logger = get_logger("retry")

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float = 1.0, max_delay: float = 10.0) -> float:
    """Delay in seconds after failed *attempt* (1-based): base doubling per attempt, capped."""
    return min(max_delay, base_delay * (2 ** max(0, attempt - 1)))


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 10.0,
    timeout: float | None = None,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    retry_if: Callable[[BaseException], bool] | None = None,
    operation: str = "call",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Call *fn* until it succeeds or *max_attempts* is reached.

    Each attempt runs under ``timeout`` seconds when given; a timeout counts as a
    failed attempt. Configuration errors are never retried, nor is anything
    *retry_if* rejects. The last exception is re-raised unchanged.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            if timeout is not None:
                return await asyncio.wait_for(fn(), timeout=timeout)
            return await fn()
        except ConfigurationError:
            raise
        except retry_on as e:
            if retry_if is not None and not retry_if(e):
                logger.info("retry_skipped_permanent", operation=operation, error=repr(e))
                raise
            if attempt >= max_attempts:
                logger.warning(
                    "retry_exhausted", operation=operation, attempts=attempt, error=repr(e)
                )
                raise
            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.info(
                "retry_scheduled",
                operation=operation,
                attempt=attempt,
                delay_s=delay,
                error=repr(e),
            )
            await sleep(delay)
