"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from cosmosdb_repository.adapters.document_client import InMemoryDocumentClient
from cosmosdb_repository.observability import tracing as tracing_module


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Strip COSMOSDB_* variables and any .env so settings fall back to defaults."""
    for key in list(os.environ):
        if key.upper().startswith("COSMOSDB_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def client() -> InMemoryDocumentClient:
    """Empty in-memory document client."""
    return InMemoryDocumentClient()


@pytest.fixture
def span_exporter():
    """Route repository spans into an in-memory exporter."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    previous = tracing_module._tracer_holder["tracer"]
    tracing_module._tracer_holder["tracer"] = provider.get_tracer("tests")
    yield exporter
    tracing_module._tracer_holder["tracer"] = previous
    exporter.clear()
