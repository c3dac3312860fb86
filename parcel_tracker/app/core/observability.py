"""
Observability Middleware.

Every request gets a correlation ID. It is echoed in the response
headers and attached to every log record emitted while the request
is being handled, so repository and service logs can be joined with
the request log line.
"""

import time
import uuid
import logging
from contextvars import ContextVar
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

CORRELATION_HEADER = "X-Correlation-ID"

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")

logger = logging.getLogger("parcel_tracker.requests")


class CorrelationIdFilter(logging.Filter):
    """Stamps the current request's correlation ID on log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get()
        return True


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        token = correlation_id_var.set(correlation_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Process-Time"] = str(duration_ms)

        log_data = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
            "ip": request.client.host if request.client else "unknown"
        }

        if response.status_code >= 500:
            logger.error("%s %s failed", request.method, request.url.path, extra=log_data)
        elif response.status_code >= 400:
            logger.warning("%s %s rejected", request.method, request.url.path, extra=log_data)
        else:
            logger.info("%s %s", request.method, request.url.path, extra=log_data)

        return response


def configure_logging(level: str) -> None:
    """Root logging setup for the service."""
    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s %(message)s"
    ))
    logging.basicConfig(level=level.upper(), handlers=[handler])
