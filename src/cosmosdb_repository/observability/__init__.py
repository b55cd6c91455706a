"""Observability module for structured logging and OpenTelemetry tracing."""

from cosmosdb_repository.observability.context import (
    get_trace_context,
    set_trace_context,
    store_binding,
    trace_context,
)
from cosmosdb_repository.observability.logging import JsonFormatter, configure_logging
from cosmosdb_repository.observability.tracing import (
    configure_trace_exporter,
    create_span,
    get_tracer,
    init_tracing,
    store_span_attributes,
)


__all__ = [
    "JsonFormatter",
    "configure_logging",
    "configure_trace_exporter",
    "create_span",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "store_binding",
    "store_span_attributes",
    "trace_context",
]
