"""Prometheus metrics for the request queue.

Metrics are process-wide collectors labelled by queue name, so several
queue instances can share them without interfering.

- Settled requests by outcome (resolved, rejected, skipped)
- Nacks (post-action retries)
- Unhandled middleware errors by stage
- Exchange duration histogram
- Queue depth gauge

Examples:
    Recording a settled request::

        from fetch_queue.observability.metrics import record_settled

        record_settled(queue="billing", outcome="resolved")
"""

from prometheus_client import Counter, Gauge, Histogram

# Labels: queue, outcome (resolved, rejected, skipped)
requests_total = Counter(
    "fetch_queue_requests_total",
    "Total number of queued requests settled",
    ["queue", "outcome"],
)

nacks_total = Counter(
    "fetch_queue_nacks_total",
    "Total number of negative acknowledgements from post-action middleware",
    ["queue"],
)

# Labels: queue, stage (request, response, error, listener)
unhandled_errors_total = Counter(
    "fetch_queue_unhandled_errors_total",
    "Total number of middleware errors routed to unhandled-error listeners",
    ["queue", "stage"],
)

exchange_seconds = Histogram(
    "fetch_queue_exchange_seconds",
    "Duration of one transport exchange in seconds",
    ["queue"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30],
)

queue_depth = Gauge(
    "fetch_queue_depth",
    "Number of requests waiting in the queue, head included",
    ["queue"],
)


def record_settled(queue: str, outcome: str) -> None:
    """Record a request leaving the queue.

    Args:
        queue: Queue name
        outcome: resolved, rejected or skipped
    """
    requests_total.labels(queue=queue, outcome=outcome).inc()


def record_nack(queue: str) -> None:
    """Record a retry requested by post-action middleware."""
    nacks_total.labels(queue=queue).inc()


def record_unhandled_error(queue: str, stage: str) -> None:
    """Record a middleware failure."""
    unhandled_errors_total.labels(queue=queue, stage=stage).inc()


def record_exchange_time(queue: str, seconds: float) -> None:
    """Record the duration of one transport exchange."""
    exchange_seconds.labels(queue=queue).observe(seconds)


def set_queue_depth(queue: str, depth: int) -> None:
    """Publish the current queue length."""
    queue_depth.labels(queue=queue).set(depth)
