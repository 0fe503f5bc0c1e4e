"""Prometheus metrics for schema checks."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import REGISTRY, Counter, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


SCHEMA_CHECKS = Counter(
    "schema_checks_total",
    "Schema validation runs by final state",
    ["state"],
)
SCHEMA_FINDINGS = Counter(
    "schema_findings_total",
    "Validation findings by kind and severity",
    ["kind", "severity"],
)
SCHEMA_FETCH_LATENCY = Histogram(
    "schema_fetch_latency_seconds",
    "Latency of Schema API requests",
    ["collection"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Observe the duration of the wrapped block, also when it raises."""
    start = time.perf_counter()
    try:
        yield
    finally:
        target = histogram.labels(**labels) if labels else histogram
        target.observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    return generate_latest(REGISTRY)
