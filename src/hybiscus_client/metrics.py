"""
Prometheus metrics for Hybiscus client monitoring.

Provides instrumentation for:
- API request rates and outcomes by endpoint
- API request latency
- Poll cycles per task
- Task outcomes by report kind
"""

from prometheus_client import Counter, Histogram

# API request metrics
api_requests_total = Counter(
    "hybiscus_api_requests_total",
    "Total number of requests sent to the Hybiscus API",
    ["endpoint", "outcome"],  # outcome: success, transport, protocol, service
)

api_request_duration_seconds = Histogram(
    "hybiscus_api_request_duration_seconds",
    "Time spent waiting for a Hybiscus API response",
    ["endpoint"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

# Polling metrics
poll_cycles_total = Counter(
    "hybiscus_poll_cycles_total",
    "Total number of status checks made by the poll loop",
)

# Task outcome metrics
tasks_completed_total = Counter(
    "hybiscus_tasks_completed_total",
    "Total number of report tasks that reached a final outcome",
    ["report_kind", "outcome"],  # outcome: success, transport, protocol, service, timeout
)

task_duration_seconds = Histogram(
    "hybiscus_task_duration_seconds",
    "Time from submission to final outcome",
    ["report_kind"],
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0),
)


def record_api_request(endpoint: str, outcome: str, duration_seconds: float) -> None:
    """Record one API request."""
    api_requests_total.labels(endpoint=endpoint, outcome=outcome).inc()
    api_request_duration_seconds.labels(endpoint=endpoint).observe(duration_seconds)


def record_poll_cycle() -> None:
    poll_cycles_total.inc()


def record_task_outcome(report_kind: str, outcome: str, duration_seconds: float) -> None:
    """Record the final outcome of a build or preview task."""
    tasks_completed_total.labels(report_kind=report_kind, outcome=outcome).inc()
    task_duration_seconds.labels(report_kind=report_kind).observe(duration_seconds)
