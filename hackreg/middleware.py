# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""HTTP middleware: request ID, access log line and Prometheus metrics."""
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from hackreg.core.logging import get_logger
from hackreg.metrics import REQUEST_COUNT, REQUEST_LATENCY, HTTP_ERRORS

logger = get_logger(__name__)

SKIP_PATHS = ("/health", "/health/ready", "/metrics", "/openapi.json", "/docs", "/redoc")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Propagate X-Request-ID and record one access entry per API call."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id

        start = time.time()
        response = await call_next(request)
        duration = time.time() - start
        response.headers["X-Request-ID"] = request_id

        path = request.url.path
        if path in SKIP_PATHS:
            return response

        status = str(response.status_code)
        REQUEST_COUNT.labels(method=request.method, endpoint=path, status=status).inc()
        REQUEST_LATENCY.labels(method=request.method, endpoint=path).observe(duration)
        if response.status_code >= 400:
            HTTP_ERRORS.labels(method=request.method, endpoint=path, status=status).inc()
        logger.info(
            "%s %s -> %s (%.1f ms)", request.method, path, status, duration * 1000,
            extra={"request_id": request_id},
        )
        return response
