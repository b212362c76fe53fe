"""
Request boundary: the one place where failures become HTTP responses.

Every request gets a trace id before downstream handlers run. Any exception
escaping them is classified into the error taxonomy, rendered as an
ErrorEnvelope with the variant's fixed status, and logged exactly once at the
variant's severity. The boundary never raises: if rendering fails it answers
with a fixed 500 body.
"""

import logging
import sys
import traceback
from collections.abc import Callable
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from invoicing.core.config import Settings
from invoicing.domain.errors import ApplicationError
from invoicing.shared.errors.envelope import ErrorEnvelope, build_envelope
from invoicing.shared.errors.policy import classify, severity_for
from invoicing.shared.request_context import (
    TRACE_ID_HEADER,
    bind_trace_id,
    reset_trace_id,
    resolve_trace_id,
)


JSON_MEDIA_TYPE = "application/json"
FALLBACK_STATUS = 500
FALLBACK_BODY = (
    b'{"errorCode":"INTERNAL_SERVER_ERROR",'
    b'"message":"Ha ocurrido un error interno en el servidor",'
    b'"details":[]}'
)

EnvelopeBuilder = Callable[..., ErrorEnvelope]


class ErrorBoundaryMiddleware(BaseHTTPMiddleware):
    """Translates any failure raised downstream into an error envelope.

    Args:
        app: The wrapped ASGI application.
        settings: Source of the run mode and the help URL base.
        logger: Where failures are reported. Defaults to this module's logger.
        envelope_builder: Renders a classified error; ``build_envelope`` by
            default.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        settings: Settings,
        logger: Optional[logging.Logger] = None,
        envelope_builder: EnvelopeBuilder = build_envelope,
    ) -> None:
        super().__init__(app)
        self._settings = settings
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._build_envelope = envelope_builder

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        trace_id = resolve_trace_id(request.headers)
        token = bind_trace_id(trace_id)
        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                response = self.render(exc, request.url.path, trace_id)
            response.headers[TRACE_ID_HEADER] = trace_id
            return response
        finally:
            reset_trace_id(token)

    def render(self, exc: Exception, path: str, trace_id: str) -> Response:
        """Build the error response for ``exc``. Never raises."""
        try:
            error = classify(exc)
            envelope = self._build_envelope(
                error,
                is_development=self._settings.is_development,
                trace_id=trace_id,
                help_base_url=self._settings.error_help_base_url,
            )
            body = envelope.to_json()
        except Exception:
            self._emit(
                self._logger.critical,
                "Error boundary could not render %s en %s. TraceId: %s",
                type(exc).__name__,
                path,
                trace_id,
                exc_info=True,
            )
            return Response(
                content=FALLBACK_BODY,
                status_code=FALLBACK_STATUS,
                media_type=JSON_MEDIA_TYPE,
            )

        self._log(error, exc, envelope, path)
        return Response(
            content=body,
            status_code=int(error.http_status),
            media_type=JSON_MEDIA_TYPE,
        )

    def _log(
        self,
        error: ApplicationError,
        exc: Exception,
        envelope: ErrorEnvelope,
        path: str,
    ) -> None:
        level = severity_for(error)
        if level >= logging.ERROR:
            self._emit(
                self._logger.log,
                level,
                "Error %s en %s: %s. TraceId: %s. Internal: %s",
                envelope.error_code,
                path,
                envelope.message,
                envelope.trace_id,
                error.internal_message,
                exc_info=(type(exc), exc, exc.__traceback__),
            )
        else:
            self._emit(
                self._logger.log,
                level,
                "Error %s en %s: %s. TraceId: %s",
                envelope.error_code,
                path,
                envelope.message,
                envelope.trace_id,
            )

    @staticmethod
    def _emit(log_method: Callable[..., None], *args, **kwargs) -> None:
        """Call ``log_method``; a failing logger is reported on stderr only."""
        try:
            log_method(*args, **kwargs)
        except Exception:
            traceback.print_exc(file=sys.stderr)
