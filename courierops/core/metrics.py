"""Prometheus metrics helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

HTTP_REQUESTS_TOTAL = Counter(
    "courierops_http_requests_total",
    "Total number of HTTP requests.",
    ["method", "route", "status"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "courierops_http_request_duration_seconds",
    "HTTP request duration in seconds.",
    ["method", "route", "status"],
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
    ),
)

STATUS_TRANSITIONS_TOTAL = Counter(
    "courierops_status_transitions_total",
    "Applied status transitions.",
    ["entity_type", "from_status", "to_status"],
)

REJECTED_TRANSITIONS_TOTAL = Counter(
    "courierops_rejected_transitions_total",
    "Status transitions refused by the lifecycle engine.",
    ["entity_type", "reason"],
)


def observe_http_request(
    *,
    method: str,
    route: str,
    status_code: int,
    duration_ms: float,
) -> None:
    status = str(status_code)
    HTTP_REQUESTS_TOTAL.labels(method=method, route=route, status=status).inc()
    HTTP_REQUEST_DURATION_SECONDS.labels(
        method=method, route=route, status=status
    ).observe(duration_ms / 1000.0)


def observe_transition(*, entity_type: str, from_status: str | None, to_status: str) -> None:
    STATUS_TRANSITIONS_TOTAL.labels(
        entity_type=entity_type,
        from_status=from_status or "none",
        to_status=to_status,
    ).inc()


def observe_rejected_transition(*, entity_type: str, reason: str) -> None:
    REJECTED_TRANSITIONS_TOTAL.labels(entity_type=entity_type, reason=reason).inc()
