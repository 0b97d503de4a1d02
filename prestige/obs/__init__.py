"""Observability utilities."""

from .metrics import (
    DUPLICATE_VOTE_COUNTER,
    RATING_CONFLICT_COUNTER,
    RATING_SNAPSHOT_COUNTER,
    REQUEST_COUNTER,
    REQUEST_ERROR_COUNTER,
    REQUEST_LATENCY_SECONDS,
    ROLLUP_LAST_SUCCESS_GAUGE,
    VOTE_COUNT_FIX_COUNTER,
    VOTES_RECORDED_COUNTER,
    PrometheusMiddleware,
    mark_rollup_success,
    metrics_router,
)
from .tracing import (
    initialise_tracing,
    instrument_fastapi_app,
    instrument_sqlalchemy_engine,
    traced_span,
)

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
    "initialise_tracing",
    "instrument_fastapi_app",
    "instrument_sqlalchemy_engine",
    "mark_rollup_success",
    "metrics_router",
    "traced_span",
]
