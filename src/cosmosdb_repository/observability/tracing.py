"""OpenTelemetry tracing for document-store calls."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import SpanKind, Status, StatusCode

from cosmosdb_repository.observability.context import trace_context, update_span_id


if TYPE_CHECKING:
    from collections.abc import Generator

    from opentelemetry.trace import Span, Tracer

    from cosmosdb_repository.config import CosmosSettings

logger = logging.getLogger(__name__)

DB_SYSTEM = "cosmosdb"

_tracer_holder: dict[str, Tracer | None] = {"tracer": None}


def init_tracing(
    service_name: str = "cosmosdb-repository",
    resource_attributes: dict[str, str] | None = None,
) -> TracerProvider:
    """Initialize OpenTelemetry tracing."""
    attributes = {"service.name": service_name}
    if resource_attributes:
        attributes.update(resource_attributes)
    provider = TracerProvider(resource=Resource.create(attributes))
    trace.set_tracer_provider(provider)
    _tracer_holder["tracer"] = trace.get_tracer(__name__)
    logger.info("Tracing initialized for service: %s", service_name)
    return provider


def configure_trace_exporter(
    settings: CosmosSettings | None,
    provider: TracerProvider | None = None,
) -> TracerProvider | None:
    """Attach an OTLP/HTTP exporter when tracing is enabled in settings."""
    if not settings or not settings.tracing_enabled:
        return None

    active_provider = provider or trace.get_tracer_provider()
    if not isinstance(active_provider, TracerProvider):
        active_provider = init_tracing(settings.service_name)

    exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint)
    active_provider.add_span_processor(BatchSpanProcessor(exporter))
    logger.info("OTLP trace export enabled to %s", settings.otlp_endpoint)
    return active_provider


def get_tracer() -> Tracer:
    """Get the configured tracer, falling back to the global provider."""
    if _tracer_holder["tracer"] is None:
        _tracer_holder["tracer"] = trace.get_tracer(__name__)
    return _tracer_holder["tracer"]  # type: ignore[return-value]


def store_span_attributes(database: str, collection: str, entity_type: str | None = None) -> dict[str, Any]:
    """Semantic attributes describing a document-store call."""
    attributes: dict[str, Any] = {
        "db.system": DB_SYSTEM,
        "db.name": database,
        "db.cosmosdb.container": collection,
    }
    if entity_type:
        attributes["cosmosdb.entity_type"] = entity_type
    return attributes


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Create a traced span with context propagation."""
    tracer = get_tracer()
    with tracer.start_as_current_span(name, kind=kind, record_exception=False, set_status_on_exception=False) as span:
        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, value)

        ctx = span.get_span_context()
        token = None
        if ctx.is_valid:
            token = update_span_id(format(ctx.span_id, "016x"), trace_id=format(ctx.trace_id, "032x"))

        try:
            yield span
        except Exception as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            span.record_exception(exc)
            raise
        finally:
            if token is not None:
                trace_context.reset(token)
