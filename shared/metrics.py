"""
Shared metrics configuration for the recipe access client.
"""

from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, Info, generate_latest


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        # A private registry keeps several collectors in one process from clashing
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up the metrics for the service."""
        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # Cache metrics
        self._metrics["cache_hits_total"] = Counter(
            "cache_hits_total",
            "Total cache hits",
            ["cache_type"],
            registry=self.registry
        )

        self._metrics["cache_misses_total"] = Counter(
            "cache_misses_total",
            "Total cache misses",
            ["cache_type"],
            registry=self.registry
        )

        self._metrics["cache_invalidations_total"] = Counter(
            "cache_invalidations_total",
            "Total cache invalidations",
            ["scope"],
            registry=self.registry
        )

        # Remote API metrics
        self._metrics["api_requests_total"] = Counter(
            "api_requests_total",
            "Total requests sent to the recipe API",
            ["method", "status"],
            registry=self.registry
        )

        self._metrics["api_request_duration_seconds"] = Histogram(
            "api_request_duration_seconds",
            "Recipe API request duration in seconds",
            ["method"],
            registry=self.registry
        )

    def get_sample_value(self, name: str, **labels) -> Optional[float]:
        """Read the current value of a sample from this collector's registry."""
        return self.registry.get_sample_value(name, labels)

    def render(self) -> bytes:
        """Render all metrics in the Prometheus text exposition format."""
        return generate_latest(self.registry)

    def record_api_request(self, method: str, status: str, duration: float):
        """Record remote API request metrics."""
        self._metrics["api_requests_total"].labels(method=method, status=status).inc()
        self._metrics["api_request_duration_seconds"].labels(method=method).observe(duration)

    def increment_counter(self, metric_name: str, **labels):
        """Increment a counter metric."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(**labels).inc()
