"""Per-request correlation id, visible to log records and error bodies."""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
import logging
from typing import Iterator, Optional

# Shown in log lines emitted outside a request (startup, background threads)
NO_REQUEST = "-"

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


@contextmanager
def request_id_scope(request_id: str) -> Iterator[str]:
    token = _request_id.set(request_id)
    try:
        yield request_id
    finally:
        _request_id.reset(token)


def current_request_id() -> Optional[str]:
    return _request_id.get()


class RequestIdLogFilter(logging.Filter):
    """Stamp ``record.request_id`` so formatters can include it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = _request_id.get() or NO_REQUEST
        return True


def install_request_id_filter(logger: Optional[logging.Logger] = None) -> None:
    """Attach the filter to every handler of ``logger`` (root by default), once."""
    for handler in (logger or logging.getLogger()).handlers:
        if not any(isinstance(f, RequestIdLogFilter) for f in handler.filters):
            handler.addFilter(RequestIdLogFilter())
