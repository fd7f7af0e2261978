"""
API Middleware.

Correlates every request with a trace ID and writes one access log
entry per request. Health checks are answered without logging.
"""

from __future__ import annotations

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.logging_config import generate_trace_id, get_logger, trace_id_var

logger = get_logger(__name__)

UNLOGGED_PATHS = frozenset({"/health"})


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Use the caller's ``X-Request-ID`` (or a fresh one) as the trace ID.

    The ID is echoed back on the response so webhook deliveries can be
    matched against the voice platform's own logs.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_trace_id()
        token = trace_id_var.set(request_id)
        start = time.monotonic()
        try:
            response = await call_next(request)
            elapsed_ms = round((time.monotonic() - start) * 1000, 1)
            response.headers["X-Request-ID"] = request_id

            if request.url.path not in UNLOGGED_PATHS:
                log = logger.warning if response.status_code >= 400 else logger.info
                log(
                    "api_request",
                    method=request.method,
                    path=request.url.path,
                    status=response.status_code,
                    elapsed_ms=elapsed_ms,
                )
            return response
        finally:
            trace_id_var.reset(token)
