"""
Activity Tracker — Access Log Middleware
==========================================

What:  One common-log-style line per request, e.g.

           127.0.0.1 alice "POST /activity/new" 302 12.4ms [a1b2c3d4]

How:   Times the downstream app with perf_counter. The level follows the
       status: 5xx ERROR, 4xx WARNING, anything else INFO. The user column
       is read from the session after the handler ran, so a sign-in shows
       the new username and anonymous requests show "-".
When:  Runs inside SessionMiddleware and RequestIDMiddleware.

Not logged: form bodies (passwords), cookies (the signed session).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from activity_tracker.middleware.request_id import request_id_var

logger = logging.getLogger("activity_tracker.access")

# Probes and static assets would drown out page requests
QUIET_PREFIXES = ("/health", "/static/")


def _status_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path.startswith(QUIET_PREFIXES):
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        client = request.client.host if request.client else "-"
        user = request.scope.get("session", {}).get("username") or "-"

        logger.log(
            _status_level(response.status_code),
            '%s %s "%s %s" %d %.1fms [%s]',
            client,
            user,
            request.method,
            target,
            response.status_code,
            elapsed_ms,
            request_id_var.get(""),
        )
        return response
