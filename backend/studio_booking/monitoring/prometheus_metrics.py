"""
Prometheus metrics for the studio booking service.

Everything is registered on a private registry so test runs and
multiple app instances in one process do not collide with the global
default collectors.
"""

from typing import Optional, Tuple

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

_FAST_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)

http_request_duration_seconds = Histogram(
    "studio_booking_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
    buckets=_FAST_BUCKETS + (10.0,),
)

http_errors_total = Counter(
    "studio_booking_http_errors_total",
    "Error responses by stable error code",
    ["code", "endpoint"],
    registry=REGISTRY,
)

service_operation_duration_seconds = Histogram(
    "studio_booking_service_operation_duration_seconds",
    "Service operation latency",
    ["service", "operation", "status"],
    registry=REGISTRY,
    buckets=_FAST_BUCKETS,
)

service_operation_errors_total = Counter(
    "studio_booking_service_operation_errors_total",
    "Service operations that raised, by exception class",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

booking_lock_total = Counter(
    "studio_booking_booking_lock_total",
    "Studio/date lock events",
    ["action", "outcome"],  # acquire|release x success|timeout
    registry=REGISTRY,
)

booking_lock_wait_seconds = Histogram(
    "studio_booking_booking_lock_wait_seconds",
    "Time spent waiting for the studio/date lock",
    registry=REGISTRY,
    buckets=_FAST_BUCKETS,
)

booking_outcomes_total = Counter(
    "studio_booking_booking_outcomes_total",
    "Booking write attempts by operation and result code",
    ["operation", "outcome"],  # outcome: created|updated|cancelled|<error code>
    registry=REGISTRY,
)

listener_failures_total = Counter(
    "studio_booking_event_listener_failures_total",
    "Post-commit booking event listener failures",
    ["event_type"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin recording facade so call sites never touch label plumbing."""

    @staticmethod
    def record_http_request(method: str, endpoint: str, duration: float, status_code: int) -> None:
        http_request_duration_seconds.labels(
            method=method, endpoint=endpoint, status_code=str(status_code)
        ).observe(duration)

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """Called by @BaseService.measure_operation after every wrapped call."""
        service_operation_duration_seconds.labels(
            service=service, operation=operation, status=status
        ).observe(duration)
        if error_type:
            service_operation_errors_total.labels(
                service=service, operation=operation, error_type=error_type
            ).inc()

    @staticmethod
    def record_booking_lock(
        action: str, outcome: str, wait_seconds: Optional[float] = None
    ) -> None:
        booking_lock_total.labels(action=action, outcome=outcome).inc()
        if wait_seconds is not None:
            booking_lock_wait_seconds.observe(max(wait_seconds, 0.0))

    @staticmethod
    def record_booking_outcome(operation: str, outcome: str) -> None:
        booking_outcomes_total.labels(operation=operation, outcome=outcome).inc()

    @staticmethod
    def record_listener_failure(event_type: str) -> None:
        listener_failures_total.labels(event_type=event_type).inc()

    @staticmethod
    def record_error(code: str, endpoint: str) -> None:
        http_errors_total.labels(code=code, endpoint=endpoint).inc()

    @staticmethod
    def render() -> Tuple[bytes, str]:
        """Exposition payload and its content type."""
        return generate_latest(REGISTRY), CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
