"""
Middleware and error handlers for the HTTP surface.
"""
import uuid
import time
import orjson
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
from .config import get_settings
from .errors import ComputeInvocationFailure, ConfigurationError, GatewayError, StoreWriteFailure

log = structlog.get_logger()

ERROR_STATUS = {
    ConfigurationError: 404,
    StoreWriteFailure: 502,
    ComputeInvocationFailure: 502,
}


def get_correlation_id() -> str | None:
    """Get the correlation ID bound to the current request context."""
    return structlog.contextvars.get_contextvars().get("correlation_id")


def route_label(request: Request) -> str:
    """Route template the request matched, so channel paths do not become label values."""
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add correlation IDs to all requests.

    - Extracts correlation ID from X-Correlation-ID header if present
    - Generates new UUID if not present
    - Binds correlation ID to structlog context
    - Adds correlation ID to response headers
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("x-correlation-id") or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            http_method=request.method,
            http_path=request.url.path,
        )

        response = await call_next(request)
        response.headers["x-correlation-id"] = correlation_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect HTTP metrics for Prometheus.

    - Records request count by method, path, status
    - Records request duration histogram
    - Tracks active requests
    """

    def __init__(self, app, metrics):
        super().__init__(app)
        self.metrics = metrics

    async def dispatch(self, request: Request, call_next):
        # Skip metrics endpoint to avoid recursion
        if request.url.path.startswith("/metrics"):
            return await call_next(request)

        service = self.metrics.service_name
        self.metrics.http_requests_active.labels(service=service).inc()
        start_time = time.time()
        status = 500

        try:
            response = await call_next(request)
            status = response.status_code
            log.info(
                "http_request",
                http_status=status,
                duration_ms=round((time.time() - start_time) * 1000, 2),
            )
            return response

        except Exception as e:
            log.error(
                "http_request_error",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round((time.time() - start_time) * 1000, 2),
            )
            raise

        finally:
            path = route_label(request)
            self.metrics.http_requests_total.labels(
                service=service,
                method=request.method,
                path=path,
                status=status,
            ).inc()
            self.metrics.http_request_duration.labels(
                service=service,
                method=request.method,
                path=path,
            ).observe(time.time() - start_time)
            self.metrics.http_requests_active.labels(service=service).dec()


class PayloadLimitMiddleware(BaseHTTPMiddleware):
    """Rejects oversized or malformed JSON bodies before they reach the router."""

    async def dispatch(self, request: Request, call_next):
        if request.method not in ("POST", "PUT", "PATCH"):
            return await call_next(request)

        max_size = get_settings().MAX_EVENT_SIZE
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > max_size:
            return _too_large(request, int(content_length), max_size)

        if request.headers.get("content-type", "").startswith("application/json"):
            body = await request.body()
            if len(body) > max_size:
                return _too_large(request, len(body), max_size)
            if body:
                try:
                    orjson.loads(body)
                except orjson.JSONDecodeError as e:
                    log.warning("invalid.json", error=str(e), path=request.url.path)
                    return JSONResponse(
                        status_code=400,
                        content={
                            "error": "InvalidJSON",
                            "message": "Request body is not valid JSON",
                            "correlation_id": get_correlation_id(),
                        }
                    )

        return await call_next(request)


def _too_large(request: Request, size: int, max_size: int) -> JSONResponse:
    log.warning("payload.too_large", size=size, max_size=max_size, path=request.url.path)
    return JSONResponse(
        status_code=413,
        content={
            "error": "PayloadTooLarge",
            "message": f"Request payload exceeds maximum size of {max_size} bytes",
            "max_size": max_size,
            "received_size": size,
            "correlation_id": get_correlation_id(),
        }
    )


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Render gateway errors as structured JSON responses."""
    status_code = ERROR_STATUS.get(type(exc), 500)
    correlation_id = get_correlation_id()
    log.warning(
        "gateway.error",
        status_code=status_code,
        error_type=type(exc).__name__,
        error=str(exc),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "message": str(exc),
            "correlation_id": correlation_id,
        }
    )
