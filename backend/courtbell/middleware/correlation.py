"""
Correlation ID middleware
=========================
Injects a unique X-Correlation-ID into every request so that all log lines
for a single HTTP call share the same identifier.

The id is also bound to ``correlation_id_var`` for the duration of the
request; the logging filter in core/logger.py stamps it on every record.
"""
from __future__ import annotations

import uuid
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from courtbell.core.logger import correlation_id_var

logger = logging.getLogger(__name__)


class CorrelationMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        # Accept from client or generate fresh
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        token = correlation_id_var.set(correlation_id)

        try:
            logger.info("%s %s", request.method, request.url.path)
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)

        # Echo the id for client-side log correlation
        response.headers["X-Correlation-ID"] = correlation_id
        return response
