"""
Request-scoped trace id.

The error boundary binds the trace id before calling downstream handlers, so
log records and error envelopes emitted while serving one request carry the
same identifier.
"""

import uuid
from collections.abc import Mapping
from contextvars import ContextVar, Token
from typing import Optional

TRACE_ID_HEADER = "X-Request-ID"
CORRELATION_ID_HEADER = "X-Correlation-ID"

_trace_id: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)


def resolve_trace_id(headers: Mapping[str, str]) -> str:
    """Reuse the caller's correlation id or generate a new one."""
    for header in (TRACE_ID_HEADER, CORRELATION_ID_HEADER):
        value = headers.get(header)
        if value and value.strip():
            return value.strip()
    return str(uuid.uuid4())


def bind_trace_id(trace_id: str) -> Token:
    return _trace_id.set(trace_id)


def reset_trace_id(token: Token) -> None:
    _trace_id.reset(token)


def current_trace_id() -> Optional[str]:
    return _trace_id.get()
