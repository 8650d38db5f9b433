"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Scan metrics
scan_attempts = Counter(
    'scan_attempts_total',
    'Total attendance scan attempts',
    ['result']  # recorded, or the error code that rejected the scan
)

scan_latency = Histogram(
    'scan_latency_seconds',
    'Attendance scan request latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Seat assignment metrics
seat_operations = Counter(
    'seat_assignment_operations_total',
    'Seat assignment operations',
    ['action', 'result']  # assign/unassign, success/noop/conflict/error
)

# Database metrics
db_retries = Counter(
    'db_retry_attempts_total',
    'Database retry attempts due to integrity conflicts'
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )

# Convenience functions for instrumentation
def record_scan(result: str):
    """Record scan attempt. Result: recorded or an error code"""
    scan_attempts.labels(result=result).inc()

def record_seat_operation(action: str, result: str):
    """Record seat operation. Action: assign, unassign"""
    seat_operations.labels(action=action, result=result).inc()

def record_db_retry():
    db_retries.inc()

def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
