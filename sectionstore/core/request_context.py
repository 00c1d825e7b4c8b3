"""Correlation ID for grouping the log lines of several persistence calls."""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    return _request_id_var.get()


@contextmanager
def request_id_context(request_id: str | None = None):
    """Set the correlation ID for the duration, generating one when none is given."""

    token = _request_id_var.set(request_id or str(uuid4()))
    try:
        yield _request_id_var.get()
    finally:
        _request_id_var.reset(token)
