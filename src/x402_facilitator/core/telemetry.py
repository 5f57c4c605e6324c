"""
OpenTelemetry spans around facilitator operations.

Only the OpenTelemetry API is used here; exporting is left to whatever
tracer provider the application installs (or the tracer injected into a
client).
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from .errors import Err, FacilitatorError, FacilitatorResponse, HookError, Ok, Result

__all__ = [
    "SPAN_PREFIX",
    "get_tracer",
    "operation_span",
    "result_attributes",
]

SPAN_PREFIX = "x402.facilitator"


def get_tracer() -> trace.Tracer:
    return trace.get_tracer("x402_facilitator")


def result_attributes(result: Result[FacilitatorResponse, Any]) -> Dict[str, Any]:
    """Stop metadata for a finished operation; ``None`` values are left out."""
    if isinstance(result, Ok):
        return {"x402.status": result.value.status, "x402.success": True}

    error = result.error
    attributes: Dict[str, Any] = {"x402.success": False}
    if isinstance(error, FacilitatorError):
        attributes.update(
            {
                "x402.status": error.status,
                "x402.error_type": error.type.value,
                "x402.retryable": error.retryable,
                "x402.attempt": error.attempt,
            }
        )
    elif isinstance(error, HookError):
        attributes["x402.error_type"] = error.kind.value
    return {key: value for key, value in attributes.items() if value is not None}


class _SpanRecorder:
    def __init__(self, span: trace.Span) -> None:
        self.span = span
        self.result: Optional[Result[FacilitatorResponse, Any]] = None

    def finish(self, result: Result[FacilitatorResponse, Any]) -> None:
        self.result = result
        self.span.set_attributes(result_attributes(result))
        if isinstance(result, Err):
            self.span.set_status(Status(StatusCode.ERROR, str(result.error)))


@contextmanager
def operation_span(
    tracer: trace.Tracer,
    operation: str,
    endpoint: str,
    *,
    name: Optional[str] = None,
) -> Iterator[_SpanRecorder]:
    """
    Wrap one verify/settle call in a span.

    The caller reports the outcome through ``recorder.finish(result)``.
    """
    attributes = {"x402.operation": operation, "x402.endpoint": endpoint}
    if name is not None:
        attributes["x402.client"] = name

    started = time.monotonic()
    with tracer.start_as_current_span(
        f"{SPAN_PREFIX}.{operation}", attributes=attributes
    ) as span:
        recorder = _SpanRecorder(span)
        yield recorder

    logging.debug(
        "%s %s finished in %.1f ms: %s",
        name or "facilitator",
        operation,
        (time.monotonic() - started) * 1000,
        result_attributes(recorder.result) if recorder.result is not None else {},
    )
