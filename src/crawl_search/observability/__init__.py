"""Observability module for tracing, metrics, and structured logging."""

from crawl_search.observability.context import get_trace_context, set_trace_context, trace_context
from crawl_search.observability.logging import JsonFormatter, configure_logging
from crawl_search.observability.metrics import (
    BACKEND_ERRORS,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    get_metrics,
    track_latency,
)
from crawl_search.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "BACKEND_ERRORS",
    "SEARCH_LATENCY",
    "SEARCH_REQUESTS",
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
