"""
Prometheus collectors for the Sideout API and its Celery jobs.

Everything registers on a private registry served at /metrics, so the
default process collectors of the worker never mix in.
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

_HTTP_LABELS = ["method", "endpoint", "status_code"]

http_request_duration_seconds = Histogram(
    "sideout_http_request_duration_seconds",
    "HTTP request latency",
    _HTTP_LABELS,
    registry=REGISTRY,
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

http_requests_total = Counter(
    "sideout_http_requests_total",
    "HTTP requests served",
    _HTTP_LABELS,
    registry=REGISTRY,
)

http_requests_in_progress = Gauge(
    "sideout_http_requests_in_progress",
    "HTTP requests currently in flight",
    ["method", "endpoint"],
    registry=REGISTRY,
)

service_operation_duration_seconds = Histogram(
    "sideout_service_operation_duration_seconds",
    "Duration of measured service operations",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "sideout_service_operations_total",
    "Measured service operations by outcome",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

service_errors_total = Counter(
    "sideout_service_errors_total",
    "Exceptions escaping measured service operations",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

lessons_booked_total = Counter(
    "sideout_lessons_booked_total",
    "Lessons created",
    ["lesson_type"],
    registry=REGISTRY,
)

stripe_webhook_events_total = Counter(
    "sideout_stripe_webhook_events_total",
    "Stripe webhook deliveries",
    ["event_type", "outcome"],  # processed | ignored | duplicate | failed
    registry=REGISTRY,
)

lesson_job_items_total = Counter(
    "sideout_lesson_job_items_total",
    "Lessons touched by the periodic maintenance jobs",
    ["job"],
    registry=REGISTRY,
)

lesson_job_last_run_timestamp = Gauge(
    "sideout_lesson_job_last_run_timestamp_seconds",
    "Unix time the maintenance job last finished",
    ["job"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    @staticmethod
    def record_http_request(method: str, endpoint: str, duration: float, status_code: int) -> None:
        labels = {"method": method, "endpoint": endpoint, "status_code": str(status_code)}
        http_request_duration_seconds.labels(**labels).observe(duration)
        http_requests_total.labels(**labels).inc()

    @staticmethod
    def track_http_request_start(method: str, endpoint: str) -> None:
        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()

    @staticmethod
    def track_http_request_end(method: str, endpoint: str) -> None:
        http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """Called by BaseService.measure_operation once per call."""
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if error_type:
            service_errors_total.labels(
                service=service, operation=operation, error_type=error_type
            ).inc()

    @staticmethod
    def inc_lessons_booked(lesson_type: str) -> None:
        lessons_booked_total.labels(lesson_type=lesson_type).inc()

    @staticmethod
    def record_webhook_event(event_type: str, outcome: str) -> None:
        stripe_webhook_events_total.labels(event_type=event_type, outcome=outcome).inc()

    @staticmethod
    def record_lesson_job(job: str, processed: int, finished_at: float) -> None:
        if processed:
            lesson_job_items_total.labels(job=job).inc(processed)
        lesson_job_last_run_timestamp.labels(job=job).set(finished_at)

    @staticmethod
    def get_metrics() -> bytes:
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
