"""
Prometheus metrics for the channel gateway.
"""
from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry


class Metrics:
    """
    Centralized metrics for the channel gateway.
    """

    def __init__(self, service_name: str = "channelgate", version: str = "0.1.0", registry=None):
        self.service_name = service_name
        self.version = version
        self.registry = registry or CollectorRegistry()

        # HTTP Metrics
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["service", "method", "path", "status"],
            registry=self.registry,
        )

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["service", "method", "path"],
            registry=self.registry,
        )

        self.http_requests_active = Gauge(
            "http_requests_active",
            "Number of active HTTP requests",
            ["service"],
            registry=self.registry,
        )
        self.http_requests_active.labels(service=service_name).set(0)

        # Application Info
        self.app_info = Info(
            "app",
            "Application information",
            registry=self.registry,
        )
        self.app_info.info({"service": service_name, "version": version})

        self.app_up = Gauge(
            "app_up",
            "Application up status (1=up, 0=down)",
            ["service", "version"],
            registry=self.registry,
        )
        self.app_up.labels(service=service_name, version=version).set(1)

        # Gateway metrics
        self.events_published_total = Counter(
            "gateway_events_published_total",
            "Total events submitted to publish calls",
            ["namespace", "strategy"],
            registry=self.registry,
        )

        self.subscriptions_total = Counter(
            "gateway_subscriptions_total",
            "Total subscribe calls handled",
            ["namespace", "strategy"],
            registry=self.registry,
        )

        self.operation_failures_total = Counter(
            "gateway_operation_failures_total",
            "Channel operations that failed",
            ["operation", "error"],
            registry=self.registry,
        )

        self.malformed_store_responses_total = Counter(
            "gateway_malformed_store_responses_total",
            "Store results that could not be decoded",
            ["table"],
            registry=self.registry,
        )

    def record_publish(self, namespace: str, strategy: str, count: int):
        """Record a publish call of ``count`` events."""
        self.events_published_total.labels(namespace=namespace, strategy=strategy).inc(count)

    def record_subscribe(self, namespace: str, strategy: str):
        self.subscriptions_total.labels(namespace=namespace, strategy=strategy).inc()

    def record_failure(self, operation: str, error: str):
        self.operation_failures_total.labels(operation=operation, error=error).inc()

    def record_malformed_response(self, table: str):
        self.malformed_store_responses_total.labels(table=table).inc()
