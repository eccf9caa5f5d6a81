"""Metrics collection for the directory service.

Provides a thin convenience wrapper around ``prometheus_client`` so the
service consistently records HTTP, search engine and ingestion metrics.

Design notes
- Metrics and labels are predeclared to avoid cardinality explosions
- One registry per collector, so several apps (e.g. in tests) can coexist
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
import structlog

logger = structlog.get_logger("metrics")


class MetricsCollector:
    """Centralized metrics collection.

    Parameters
    - service_name: Logical name used for scoping/labels if desired
    - registry: Optional custom ``CollectorRegistry`` (e.g. for testing)
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry or CollectorRegistry()

        self.request_count = Counter(
            'http_requests_total',
            'Total HTTP requests',
            ['method', 'endpoint', 'status'],
            registry=self.registry
        )

        self.request_duration = Histogram(
            'http_request_duration_seconds',
            'HTTP request duration',
            ['method', 'endpoint'],
            registry=self.registry
        )

        self.engine_operations = Counter(
            'search_engine_operations_total',
            'Total search engine operations',
            ['operation', 'outcome'],
            registry=self.registry
        )

        # Collection names are caller-supplied, so they are not a label
        self.documents_ingested = Counter(
            'ingested_documents_total',
            'Documents indexed by bulk ingestion',
            registry=self.registry
        )

    def record_http_request(
        self,
        method: str,
        endpoint: str,
        status: int,
        duration: float
    ) -> None:
        """Record HTTP request metrics.

        duration is expected in seconds to match Prometheus histogram units.
        """
        self.request_count.labels(method=method, endpoint=endpoint, status=status).inc()
        self.request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def record_engine_operation(self, operation: str, outcome: str) -> None:
        """Record one search engine call; outcome is ``success`` or ``error``."""
        self.engine_operations.labels(operation=operation, outcome=outcome).inc()

    def record_ingested_documents(self, count: int) -> None:
        if count:
            self.documents_ingested.inc(count)

    def get_metrics(self) -> str:
        """Get metrics in Prometheus exposition format for scraping."""
        return generate_latest(self.registry).decode('utf-8')
