"""Deadline-bounded polling shared by the service and container runners."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import TypeVar

from cronswarm.core.errors import MaxTimeRunningError

T = TypeVar("T")

DEFAULT_POLL_INTERVAL = timedelta(milliseconds=100)
DEFAULT_MAX_RUNTIME = timedelta(hours=24)


async def _poll(
    check: Callable[[], Awaitable[T | None]],
    *,
    started_at: datetime,
    max_runtime: timedelta,
    interval: timedelta,
    clock: Callable[[], datetime],
) -> T:
    while True:
        await asyncio.sleep(interval.total_seconds())

        if started_at < clock() - max_runtime:
            raise MaxTimeRunningError()

        result = await check()
        if result is not None:
            return result


async def watch(
    check: Callable[[], Awaitable[T | None]],
    *,
    started_at: datetime,
    max_runtime: timedelta,
    interval: timedelta,
    clock: Callable[[], datetime],
) -> T:
    """Poll ``check`` every ``interval`` until it returns a value.

    Each tick first compares ``started_at`` against ``clock() - max_runtime``
    and raises ``MaxTimeRunningError`` once the budget is spent, then runs
    ``check``; ``None`` means "no determination yet". The first tick fires
    one interval after the call. Polling runs in its own task, owned by the
    caller and joined before returning.
    """
    task = asyncio.create_task(
        _poll(check, started_at=started_at, max_runtime=max_runtime, interval=interval, clock=clock)
    )
    try:
        return await task
    finally:
        if not task.done():
            task.cancel()
