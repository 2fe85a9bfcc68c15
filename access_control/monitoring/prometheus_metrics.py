"""
Prometheus metrics module for the access-control engine.

Service timings come from the @measure_operation decorator; the cache
invalidation listeners and the token lifecycle record their own counters.
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "access_control_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "access_control_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "access_control_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

role_events_total = Counter(
    "access_control_role_events_total",
    "Cache invalidation events by event class and outcome",
    ["event_type", "outcome"],  # processed | failed | dropped
    registry=REGISTRY,
)

token_operations_total = Counter(
    "access_control_token_operations_total",
    "Session token operations by operation and outcome",
    ["operation", "outcome"],  # success | rejected
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'AccessListService')
            operation: Operation/method name (e.g., 'resolve_access')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_role_event(event_type: str, outcome: str) -> None:
        role_events_total.labels(event_type=event_type, outcome=outcome).inc()

    @staticmethod
    def record_token_operation(operation: str, outcome: str) -> None:
        token_operations_total.labels(operation=operation, outcome=outcome).inc()

    @staticmethod
    def get_metrics() -> bytes:
        """Render the registry in the Prometheus text exposition format."""
        return bytes(generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        return str(CONTENT_TYPE_LATEST)


prometheus_metrics = PrometheusMetrics()
