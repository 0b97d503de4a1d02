"""Worker that snapshots yesterday's ratings after every UTC day boundary."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, date, datetime, timedelta

from prestige.core.config import get_settings
from prestige.core.logging import configure_logging
from prestige.db.session import SessionLocal
from prestige.obs import mark_rollup_success
from prestige.services.aggregation import process_daily_updates
from prestige.workers.observability import configure_worker, worker_span

from .scheduler import run_daily_scheduler

LOGGER = logging.getLogger(__name__)

WORKER_ACTOR = "daily-rollup-worker"


def run_once(*, now: datetime | None = None, session_factory=SessionLocal) -> date:
    """Snapshot the day before ``now`` (UTC) and return that day."""

    current = now or datetime.now(tz=UTC)
    target = current.astimezone(UTC).date() - timedelta(days=1)
    with worker_span("daily_rollup.cycle", target_date=target.isoformat()):
        with session_factory() as session:
            updates = process_daily_updates(session, target, actor=WORKER_ACTOR)
    mark_rollup_success()
    LOGGER.info(
        "daily rollup complete",
        extra={"date": target.isoformat(), "companies": len(updates)},
    )
    return target


async def run_cycle() -> None:
    """Run one rollup without letting a failed day stop the schedule.

    A day that fails here stays unsnapshotted until it is re-run through
    ``POST /api/admin/daily-updates``; later days still run on time.
    """

    try:
        await asyncio.to_thread(run_once)
    except Exception as exc:
        LOGGER.exception("daily rollup failed", extra={"error": str(exc)})


async def run() -> None:
    """Run the rollup forever, once per day at the configured UTC hour."""

    settings = get_settings()
    configure_worker(WORKER_ACTOR)
    LOGGER.info("starting daily rollup worker", extra={"hour_utc": settings.daily_rollup_hour_utc})

    await run_daily_scheduler(run_cycle, hour=settings.daily_rollup_hour_utc)


def main() -> None:
    configure_logging()
    try:
        asyncio.run(run())
    except KeyboardInterrupt:  # pragma: no cover - manual shutdown
        LOGGER.info("daily rollup worker stopped")


if __name__ == "__main__":
    main()
