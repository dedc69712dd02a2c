# backend/tracker/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

A single timeline request fans out into several upstream fetches; tagging
every log line with the request's correlation ID ties them back together.

Correlation ID Sources (in order of precedence):
1. X-Correlation-ID header (from client or upstream service)
2. X-Request-ID header (alternative header name)
3. Generated UUID if neither header is present

Client IDs longer than MAX_CORRELATION_ID_LENGTH are truncated. The ID in
effect is echoed back in the X-Correlation-ID response header.
"""

import logging
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from tracker.utils.context import correlation_scope

logger = logging.getLogger(__name__)

# Header names for correlation ID
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Stores a per-request correlation ID in context and echoes it back."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        with correlation_scope(self._get_correlation_id(request)) as correlation_id:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response

    @staticmethod
    def _get_correlation_id(request: Request) -> str | None:
        """First non-empty tracing header; None lets the scope generate one."""
        for header in (CORRELATION_ID_HEADER, REQUEST_ID_HEADER):
            value = request.headers.get(header, "").strip()
            if value:
                return value
        return None
