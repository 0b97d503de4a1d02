from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient
from opentelemetry import trace

from prestige.obs import (
    ROLLUP_LAST_SUCCESS_GAUGE,
    PrometheusMiddleware,
    initialise_tracing,
    mark_rollup_success,
    metrics_router,
    traced_span,
)


def test_metrics_endpoint_exposes_vote_counters() -> None:
    app = FastAPI()
    app.add_middleware(PrometheusMiddleware)
    app.include_router(metrics_router)

    client = TestClient(app)
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert "votes_recorded_total" in response.text


def test_mark_rollup_success_sets_gauge() -> None:
    mark_rollup_success(1_700_000_000.0)
    sample_family = next(iter(ROLLUP_LAST_SUCCESS_GAUGE.collect()))
    assert sample_family.samples[0].value == 1_700_000_000.0


def test_traced_span_nests_under_current_span() -> None:
    initialise_tracing(service_name="unit-test-service", instrument_logging=False)
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span("parent") as parent:
        with traced_span("child", company_id=7) as span:
            assert span.get_span_context().trace_id == parent.get_span_context().trace_id
