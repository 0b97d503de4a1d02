"""Scheduler that fires once per UTC day."""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable


def next_run_at(reference: datetime, *, hour: int = 0) -> datetime:
    """Return the next UTC instant at ``hour``:00 strictly after ``reference``."""

    current = reference.astimezone(timezone.utc) if reference.tzinfo else reference.replace(tzinfo=timezone.utc)
    candidate = current.replace(hour=hour, minute=0, second=0, microsecond=0)
    if candidate <= current:
        candidate += timedelta(days=1)
    return candidate


async def run_daily_scheduler(
    callback: Callable[[], Awaitable[None]],
    *,
    hour: int = 0,
    now_fn: Callable[[], datetime] | None = None,
    sleep_fn: Callable[[float], Awaitable[None]] = asyncio.sleep,
    iterations: int | None = None,
) -> None:
    """Invoke ``callback`` once a day at ``hour`` UTC relative to ``now_fn``."""

    now_provider = now_fn or (lambda: datetime.now(timezone.utc))
    executed = 0

    while iterations is None or executed < iterations:
        now = now_provider()
        target = next_run_at(now, hour=hour)
        delay = max((target - now).total_seconds(), 0.0)
        await sleep_fn(delay)
        await callback()
        executed += 1
