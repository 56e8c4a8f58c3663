"""Prometheus metric definitions for provider calls and the HTTP surface."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


provider_requests_total = Counter(
    "provider_requests_total",
    "Total calls forwarded to the payment provider",
    ["service", "operation"],
)
provider_failures_total = Counter(
    "provider_failures_total",
    "Provider calls that ended in a provider error",
    ["service", "operation", "error_code"],
)
provider_latency_seconds = Histogram(
    "provider_latency_seconds",
    "Provider call latency seconds",
    ["service", "operation"],
)
operations_cancelled_total = Counter(
    "operations_cancelled_total",
    "Operations aborted by the caller's cancellation signal",
    ["service", "operation"],
)
validation_rejections_total = Counter(
    "validation_rejections_total",
    "Requests rejected before reaching the provider",
    ["service", "operation"],
)
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
