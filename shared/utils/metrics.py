"""Prometheus metrics helpers."""

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram


def create_counter(
    name: str,
    description: str,
    labels: list[str] | None = None,
    registry: CollectorRegistry | None = REGISTRY,
) -> Counter:
    """Create a Prometheus counter metric.

    Args:
        name: Metric name (e.g., 'storage_uploads_total')
        description: Human-readable description
        labels: List of label names for the metric
        registry: Registry to register with (defaults to the global one)
    """
    return Counter(name, description, labels or [], registry=registry)


def create_histogram(
    name: str,
    description: str,
    labels: list[str] | None = None,
    buckets: tuple[float, ...] | None = None,
    registry: CollectorRegistry | None = REGISTRY,
) -> Histogram:
    """Create a Prometheus histogram metric.

    Args:
        name: Metric name (e.g., 'storage_upload_duration_seconds')
        description: Human-readable description
        labels: List of label names for the metric
        buckets: Custom bucket boundaries
        registry: Registry to register with (defaults to the global one)
    """
    if buckets is None:
        # Sized for uploads, not API calls
        buckets = (0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0)
    return Histogram(name, description, labels or [], buckets=buckets, registry=registry)
