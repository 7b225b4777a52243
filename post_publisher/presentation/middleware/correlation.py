"""
Request correlation for the trigger.

Callers (cron jobs, database webhooks) may send X-Request-ID; otherwise
one is generated. The id tags every log line and SQL statement of the
request and is echoed back in the response.
"""

from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ...infrastructure.logging import Timer, set_correlation_id

logger = structlog.get_logger()

# Polled every few seconds by the platform
QUIET_PATHS = frozenset({"/health", "/health/ready"})


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        set_correlation_id(request_id)

        with structlog.contextvars.bound_contextvars(correlation_id=request_id):
            with Timer() as t:
                response = await call_next(request)

            if request.url.path not in QUIET_PATHS:
                logger.info(
                    "Trigger request handled",
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=t.duration_ms,
                )

        response.headers["X-Request-ID"] = request_id
        return response
