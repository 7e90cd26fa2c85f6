"""
Request observability middleware.

Tags every request with a correlation id, logs one structured line when it
starts and one when it ends, and feeds the HTTP Prometheus metrics.
"""

import logging
import re
import time
import uuid
from typing import Callable, Optional, Tuple

from django.http import HttpRequest, HttpResponse
from opentelemetry import trace
from opentelemetry.trace import format_span_id, format_trace_id

from core.metrics import http_request_duration_seconds, http_requests_total

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

UUID_SEGMENT = re.compile(r"/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}")
NUMERIC_SEGMENT = re.compile(r"/\d+")


def normalize_endpoint(path: str) -> str:
    """Collapse identifiers in a path so metric labels stay bounded."""
    return NUMERIC_SEGMENT.sub("/{id}", UUID_SEGMENT.sub("/{id}", path))


def current_trace_context() -> Tuple[Optional[str], Optional[str]]:
    """Trace and span ids of the active span, if one is recording."""
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None, None
    return format_trace_id(span_context.trace_id), format_span_id(span_context.span_id)


def outcome_of(status_code: int) -> str:
    if status_code >= 500:
        return "server_error"
    if status_code >= 400:
        return "client_error"
    return "success"


class ObservabilityMiddleware:
    """Correlation ids, request logs and HTTP metrics."""

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.correlation_id = correlation_id  # type: ignore

        trace_id, span_id = current_trace_context()
        if trace_id:
            request.trace_id = trace_id  # type: ignore

        context = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.path,
        }
        if trace_id:
            context.update(trace_id=trace_id, span_id=span_id)

        logger.info(
            "%s %s started",
            request.method,
            request.path,
            extra={**context, "remote_addr": request.META.get("REMOTE_ADDR")},
        )

        started = time.monotonic()
        try:
            response = self.get_response(request)
        except Exception as e:
            elapsed = time.monotonic() - started
            self._observe(request, 500, elapsed)
            logger.error(
                "%s %s raised %s",
                request.method,
                request.path,
                type(e).__name__,
                extra={**context, "duration_ms": round(elapsed * 1000, 2)},
                exc_info=True,
            )
            raise

        elapsed = time.monotonic() - started
        outcome = outcome_of(response.status_code)
        self._observe(request, response.status_code, elapsed)

        level = {"server_error": logging.ERROR, "client_error": logging.WARNING}.get(
            outcome, logging.INFO
        )
        logger.log(
            level,
            "%s %s -> %d",
            request.method,
            request.path,
            response.status_code,
            extra={
                **context,
                "status_code": response.status_code,
                "request_status": outcome,
                "duration_ms": round(elapsed * 1000, 2),
            },
        )

        response[CORRELATION_HEADER] = correlation_id
        response["X-Request-Status"] = outcome
        response["X-Request-Duration"] = f"{elapsed:.3f}"
        if trace_id:
            response["X-Trace-ID"] = trace_id
        return response

    @staticmethod
    def _observe(request: HttpRequest, status_code: int, elapsed: float) -> None:
        endpoint = normalize_endpoint(request.path)
        http_requests_total.labels(
            method=request.method, endpoint=endpoint, status_code=status_code
        ).inc()
        http_request_duration_seconds.labels(method=request.method, endpoint=endpoint).observe(
            elapsed
        )
