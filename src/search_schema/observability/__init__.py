"""Observability module for tracing, metrics, and logging."""

from search_schema.observability.context import get_trace_context, set_trace_context, trace_context
from search_schema.observability.logging import JsonFormatter, configure_logging
from search_schema.observability.metrics import (
    SCHEMA_CHECKS,
    SCHEMA_FETCH_LATENCY,
    SCHEMA_FINDINGS,
    get_metrics,
    track_latency,
)
from search_schema.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "SCHEMA_CHECKS",
    "SCHEMA_FETCH_LATENCY",
    "SCHEMA_FINDINGS",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
