"""
Access logging middleware.

Writes one INFO line per request: method, path, status, elapsed time and
trace id. Failures are logged by the error boundary, not here.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from invoicing.shared.request_context import TRACE_ID_HEADER

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %d (%.1f ms) trace_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            response.headers.get(TRACE_ID_HEADER, "-"),
        )
        return response
