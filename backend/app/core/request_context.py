# backend/app/core/request_context.py
"""
Correlation ids for log lines.

HTTP requests carry the X-Request-ID value; periodic Celery jobs use a
``job:<name>`` label so their log lines can be grepped the same way.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
import logging
from typing import Iterator, Optional

NO_REQUEST = "-"

_correlation_id: ContextVar[str] = ContextVar("sideout_request_id", default=NO_REQUEST)


def set_request_id(request_id: Optional[str]) -> Token[str]:
    return _correlation_id.set(request_id or NO_REQUEST)


def reset_request_id(token: Token[str]) -> None:
    _correlation_id.reset(token)


def current_request_id() -> str:
    return _correlation_id.get()


@contextmanager
def request_id_scope(request_id: str) -> Iterator[str]:
    """Bind a correlation id for the duration of a block."""
    token = set_request_id(request_id)
    try:
        yield request_id
    finally:
        reset_request_id(token)


class RequestIdFilter(logging.Filter):
    """Stamp ``record.request_id`` so format strings can reference it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = current_request_id()
        return True


def attach_request_id_filter(logger: Optional[logging.Logger] = None) -> None:
    target = logger or logging.getLogger()
    for handler in target.handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
