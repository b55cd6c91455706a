"""Correlation context shared by log records and spans.

Holds the current trace/span ids plus the database and collection the
active repository is bound to, so every log line emitted while serving a
repository call can be attributed to its store target.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from uuid import uuid4


trace_context: ContextVar[dict | None] = ContextVar("cosmosdb_trace_context", default=None)


def generate_trace_id() -> str:
    """Generate a 32-char hex trace ID."""
    return uuid4().hex


def generate_span_id() -> str:
    """Generate a 16-char hex span ID."""
    return uuid4().hex[:16]


def get_trace_context() -> dict:
    """Get current context, creating trace and span ids on first use."""
    ctx = trace_context.get()
    if ctx is None or not ctx.get("trace_id"):
        ctx = {**(ctx or {}), "trace_id": generate_trace_id(), "span_id": generate_span_id()}
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, **extra: object) -> None:
    """Replace the context for the current task."""
    trace_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def update_span_id(span_id: str, trace_id: str | None = None) -> Token:
    """Update span_id (and trace_id when given) while preserving everything else.

    Returns the token that restores the previous context via ``trace_context.reset``.
    """
    ctx = trace_context.get() or {}
    updated = {**ctx, "span_id": span_id}
    if trace_id:
        updated["trace_id"] = trace_id
    elif not updated.get("trace_id"):
        updated["trace_id"] = generate_trace_id()
    return trace_context.set(updated)


@contextmanager
def store_binding(database: str, collection: str) -> Iterator[dict]:
    """Attach a database/collection pair to the context for the enclosed block."""
    ctx = get_trace_context()
    token = trace_context.set({**ctx, "database": database, "collection": collection})
    try:
        yield trace_context.get() or {}
    finally:
        trace_context.reset(token)
