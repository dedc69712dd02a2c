# backend/tracker/utils/context.py
"""
Correlation ID for the request being served.

A timeline request fans out into one upstream fetch per symbol plus an FX
fetch; every log line those fetches emit carries the same ID, so a slow or
failing valuation can be traced from the access log down to the provider
call that caused it.

Sync routes run in Starlette's threadpool, which copies the current
context, so the ID set by the middleware is visible inside the feed.

Usage:
    from tracker.utils.context import correlation_scope, get_correlation_id

    with correlation_scope("abc-123"):
        get_correlation_id()  # "abc-123"
    get_correlation_id()      # previous value restored
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# Longest client-supplied ID kept verbatim; longer headers are cut
MAX_CORRELATION_ID_LENGTH = 64


def new_correlation_id() -> str:
    return str(uuid.uuid4())


def get_correlation_id() -> str | None:
    """The active correlation ID, or None outside a request."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> Token:
    """
    Activate a correlation ID.

    Returns:
        Token that clear_correlation_id() uses to restore the previous ID
    """
    return _correlation_id_var.set(correlation_id[:MAX_CORRELATION_ID_LENGTH])


def clear_correlation_id(token: Token | None = None) -> None:
    """Restore the ID active before `token` was issued, or unset it."""
    if token is not None:
        _correlation_id_var.reset(token)
    else:
        _correlation_id_var.set(None)


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """
    Run a block under a correlation ID (a fresh one when None is given).

    Yields:
        The ID in effect, after truncation
    """
    token = set_correlation_id(correlation_id or new_correlation_id())
    try:
        yield get_correlation_id()
    finally:
        clear_correlation_id(token)
