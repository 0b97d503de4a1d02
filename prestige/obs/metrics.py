"""Prometheus metrics for the API and the rollup worker."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_LATENCY_SECONDS = Histogram(
    "http_request_latency_seconds",
    "Latency of HTTP requests in seconds.",
    labelnames=("method", "route"),
)
REQUEST_COUNTER = Counter(
    "http_requests_total",
    "Total number of HTTP requests processed.",
    labelnames=("method", "route", "status"),
)
REQUEST_ERROR_COUNTER = Counter(
    "http_request_errors_total",
    "Total number of HTTP requests that resulted in server errors.",
    labelnames=("method", "route", "status"),
)
VOTES_RECORDED_COUNTER = Counter(
    "votes_recorded_total",
    "Votes committed to the ledger together with their rating changes.",
)
DUPLICATE_VOTE_COUNTER = Counter(
    "votes_duplicate_total",
    "Vote submissions rejected because the voter already voted that day.",
)
RATING_CONFLICT_COUNTER = Counter(
    "rating_update_conflicts_total",
    "Rating updates rolled back and retried after a concurrent write.",
)
RATING_SNAPSHOT_COUNTER = Counter(
    "rating_history_snapshots_written_total",
    "Daily rating snapshots written or overwritten.",
)
VOTE_COUNT_FIX_COUNTER = Counter(
    "vote_count_fixes_total",
    "Company vote counters reset to the ledger count.",
)
ROLLUP_LAST_SUCCESS_GAUGE = Gauge(
    "daily_rollup_last_success_timestamp_seconds",
    "Unix time of the last successful daily rating rollup.",
)


def _route_label(request: Request) -> str:
    # Templated path keeps label cardinality bounded (/api/comparisons/{day}).
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware that records request metrics for Prometheus scraping."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:  # type: ignore[override]
        method = request.method
        start_time = time.perf_counter()
        status = "500"

        try:
            response = await call_next(request)
            status = str(response.status_code)
            if response.status_code >= 500:
                REQUEST_ERROR_COUNTER.labels(method=method, route=_route_label(request), status=status).inc()
            return response
        except Exception:
            REQUEST_ERROR_COUNTER.labels(method=method, route=_route_label(request), status="500").inc()
            raise
        finally:
            route = _route_label(request)
            REQUEST_LATENCY_SECONDS.labels(method=method, route=route).observe(time.perf_counter() - start_time)
            REQUEST_COUNTER.labels(method=method, route=route, status=status).inc()


metrics_router = APIRouter(tags=["observability"])


@metrics_router.get("/metrics", include_in_schema=False)
def metrics_endpoint() -> Response:
    """Expose Prometheus metrics for scraping."""
    payload = generate_latest()
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


def mark_rollup_success(timestamp: float | None = None) -> None:
    ROLLUP_LAST_SUCCESS_GAUGE.set(timestamp if timestamp is not None else time.time())


__all__ = [
    "DUPLICATE_VOTE_COUNTER",
    "PrometheusMiddleware",
    "RATING_CONFLICT_COUNTER",
    "RATING_SNAPSHOT_COUNTER",
    "REQUEST_COUNTER",
    "REQUEST_ERROR_COUNTER",
    "REQUEST_LATENCY_SECONDS",
    "ROLLUP_LAST_SUCCESS_GAUGE",
    "VOTES_RECORDED_COUNTER",
    "VOTE_COUNT_FIX_COUNTER",
    "mark_rollup_success",
    "metrics_endpoint",
    "metrics_router",
]
