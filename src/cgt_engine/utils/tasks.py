"""Structured fan-out for required concurrent stages."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any


async def run_all(*coros: Coroutine[Any, Any, Any]) -> list[Any]:
    """Run *coros* concurrently and return their results in order.

    The first failure cancels the siblings still running and is re-raised
    unwrapped, so callers see the same exception a plain await would give.
    """
    tasks: list[asyncio.Task] = []
    try:
        async with asyncio.TaskGroup() as tg:
            for coro in coros:
                tasks.append(tg.create_task(coro))
    except ExceptionGroup as eg:
        raise eg.exceptions[0] from None
    return [t.result() for t in tasks]
