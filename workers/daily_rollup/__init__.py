"""Daily rating rollup worker."""
from .scheduler import next_run_at, run_daily_scheduler

__all__ = ["next_run_at", "run_daily_scheduler"]
