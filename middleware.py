from __future__ import annotations
import logging
import time
import uuid
from typing import Callable
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable):
        req_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = req_id
        response = await call_next(request)
        response.headers[self.header_name] = req_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """One log line per request; ``mode`` is off | basic | full."""

    def __init__(self, app, mode: str = "basic"):
        super().__init__(app)
        self.mode = mode

    async def dispatch(self, request: Request, call_next: Callable):
        if self.mode == "off":
            return await call_next(request)
        start = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            dur_ms = (time.perf_counter() - start) * 1000.0
            extra = {
                "request_id": getattr(request.state, "request_id", "-"),
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(dur_ms, 1),
            }
            if self.mode == "full":
                extra["query"] = request.url.query
                extra["user_agent"] = request.headers.get("user-agent", "-")
                extra["correlation_id"] = request.headers.get("X-Correlation-ID", "-")
            logger.info(
                "%s %s => %s [%.1fms] rid=%s",
                request.method, request.url.path, status, dur_ms, extra["request_id"],
                extra=extra,
            )
