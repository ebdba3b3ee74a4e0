"""
Channel gateway - channel-addressed publish/subscribe service.

Features:
- Per-namespace handler strategies (direct store resolution or compute forwarding)
- Structured logging with correlation IDs
- Prometheus metrics
- Health checks (liveness and readiness)
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from .config import get_settings
from .errors import GatewayError
from .logging import setup_logging, get_logger
from .api.router import router
from .middleware import CorrelationIdMiddleware, MetricsMiddleware, PayloadLimitMiddleware, gateway_error_handler
from .metrics import Metrics
from .health import HealthChecker
from .services.gateway import build_gateway, create_store

VERSION = "0.1.0"

settings = get_settings()

setup_logging(json_output=settings.LOG_JSON, service_name="channelgate")
logger = get_logger()

metrics = Metrics(service_name="channelgate", version=VERSION)

store = create_store(settings) if settings.direct_namespaces() else None
gateway = build_gateway(settings, store=store, metrics=metrics)
health_checker = HealthChecker(store=store, service_name="channelgate", version=VERSION)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "service_starting",
        version=VERSION,
        env=settings.ENV,
        store_adapter=settings.STORE_ADAPTER,
        namespaces=gateway.router.namespaces(),
    )
    yield
    logger.info("service_stopping")
    metrics.app_up.labels(service="channelgate", version=VERSION).set(0)
    close = getattr(store, "close", None)
    if close:
        close()


app = FastAPI(
    title="Channel Gateway",
    version=VERSION,
    description="Channel-addressed publish/subscribe event gateway",
    lifespan=lifespan,
)
app.state.gateway = gateway

# Middleware runs outermost-last: correlation ID wraps metrics, which wraps payload limits
app.add_middleware(PayloadLimitMiddleware)
app.add_middleware(MetricsMiddleware, metrics=metrics)
app.add_middleware(CorrelationIdMiddleware)

app.add_exception_handler(GatewayError, gateway_error_handler)

app.include_router(router)

# Mount Prometheus metrics endpoint
app.mount("/metrics", make_asgi_app(registry=metrics.registry))


@app.get("/health")
async def health():
    """
    Liveness probe - basic health check.

    Returns 200 if service is running.
    """
    logger.debug("health_check_liveness")
    return health_checker.liveness()


@app.get("/health/ready")
async def health_ready():
    """
    Readiness probe.

    Returns:
        200: Service is ready to handle traffic
        503: Service is not ready
    """
    result = await health_checker.readiness()
    status_code = 200 if result["status"] == "ready" else 503
    return JSONResponse(result, status_code=status_code)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "channelgate.main:app",
        host="0.0.0.0",
        port=settings.SERVICE_PORT,
        reload=True,
    )
