import uuid
from contextvars import ContextVar
from typing import Optional

from src.shared.utilities.helpers import generate_trace_id
from src.shared.utilities.types import TraceId

# Set per request by the request logging middleware
_request_trace_id: ContextVar[Optional[TraceId]] = ContextVar("request_trace_id", default=None)


class Tracer:
    """Manager for trace and span IDs."""

    def __init__(self, trace_id: TraceId = None):
        """Initialize tracer with optional fallback trace ID."""
        self.trace_id = trace_id or generate_trace_id()
        self.span_id = str(uuid.uuid4())

    @staticmethod
    def bind_request(trace_id: TraceId = None) -> TraceId:
        """Start a request-scoped trace, shared by every tracer in this context."""
        bound = trace_id or generate_trace_id()
        _request_trace_id.set(bound)
        return bound

    def get_trace_id(self) -> TraceId:
        """Request trace ID when inside a request, else the tracer's own."""
        return _request_trace_id.get() or self.trace_id

    def get_span_id(self) -> str:
        return self.span_id

    def new_span(self) -> str:
        self.span_id = str(uuid.uuid4())
        return self.span_id
