"""Prometheus metrics for monitoring payment timeliness and backend health"""

from prometheus_client import Counter, Histogram

from payment_tracker.domain.models import PaymentStatus, StatusKind

# Payment metrics
payment_status_counter = Counter(
    "payment_tracker_payments_total",
    "Payments recorded by timeliness",
    ["status"],  # late | on_time | early
)

payment_delay_histogram = Histogram(
    "payment_tracker_late_days",
    "Days overdue for late payments",
    buckets=[1, 3, 7, 15, 30, 60, 90],
)

# Hosted backend metrics
backend_failures_counter = Counter(
    "backend_failures_total",
    "Failed hosted backend calls",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_payment(status: PaymentStatus) -> None:
    """Record timeliness of a newly registered payment"""
    payment_status_counter.labels(status=status.status.value).inc()
    if status.status == StatusKind.LATE:
        payment_delay_histogram.observe(status.days)
