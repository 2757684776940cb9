"""Per-request log context."""

import time
import typing as t
import uuid

import structlog
from django.http import HttpRequest, HttpResponse

from common.observability import current_trace_id
from common.utils import get_client_ip

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class StructlogContextMiddleware:
    """Binds request id, route, client IP and trace id to every log line of a request.

    The request id is taken from ``X-Request-ID`` when the caller sends one and is echoed
    back on the response.
    """

    def __init__(self, get_response: t.Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.path,
            ip_address=get_client_ip(request),
        )
        if trace_id := current_trace_id():
            structlog.contextvars.bind_contextvars(trace_id=trace_id)

        started = time.perf_counter()
        try:
            response = self.get_response(request)
            response[REQUEST_ID_HEADER] = request_id
            logger.debug(
                "request_finished",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            return response
        finally:
            structlog.contextvars.clear_contextvars()
