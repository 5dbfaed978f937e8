"""
Metrics Collection for OpenAPI Directory

Prometheus counters, gauges and histograms for indexing and retrieval. Each manager owns a
private `CollectorRegistry`, so several managers (one per test, one per process) never
collide on metric names. The HTTP exporter only starts when `start_server` is called.

Metric Categories:
1. Index Metrics:
   - Entries embedded / skipped per specification
   - Provider batch errors
   - Operations skipped while indexing
   - Token map size

2. Search Metrics:
   - Searches performed
   - Search latency

Example Usage:
    from openapi_directory.monitoring.metrics import MetricsManager

    metrics = MetricsManager()
    metrics.track_entries_embedded("petstore", 42)

    with metrics.search_timer():
        matches = index.search(...)
"""

import logging
import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    start_http_server,
)

logger = logging.getLogger(__name__)


class MetricsManager:
    """Metrics manager."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize metrics manager.

        Args:
            registry: Registry to register metrics in (default: a new private one)
        """
        self.registry = registry or CollectorRegistry()
        self.server_port: Optional[int] = None
        self.counters: Dict[str, Counter] = {}
        self.gauges: Dict[str, Gauge] = {}
        self.histograms: Dict[str, Histogram] = {}
        self._initialize_metrics()

    def _initialize_metrics(self) -> None:
        """Initialize metrics."""
        # Counters
        self.counters["entries_embedded"] = Counter(
            "entries_embedded_total",
            "Total number of token entries embedded",
            ["spec_id"],
            registry=self.registry,
        )
        self.counters["entries_skipped"] = Counter(
            "entries_skipped_total",
            "Total number of token entries skipped as unchanged or empty",
            ["spec_id"],
            registry=self.registry,
        )
        self.counters["provider_batch_errors"] = Counter(
            "provider_batch_errors_total",
            "Total number of embedding batches that failed after retry",
            registry=self.registry,
        )
        self.counters["operations_skipped"] = Counter(
            "operations_skipped_total",
            "Total number of operations skipped while indexing",
            ["spec_id"],
            registry=self.registry,
        )
        self.counters["searches_performed"] = Counter(
            "searches_performed_total",
            "Total number of similarity searches performed",
            registry=self.registry,
        )

        # Gauges
        self.gauges["token_map_size"] = Gauge(
            "token_map_size",
            "Number of token entries of the last indexed specification",
            ["spec_id"],
            registry=self.registry,
        )

        # Histograms
        self.histograms["search_latency"] = Histogram(
            "search_latency_seconds",
            "Search latency in seconds",
            registry=self.registry,
        )

    def start_server(self, port: int) -> None:
        """Expose metrics over HTTP.

        Args:
            port: Port to listen on
        """
        if self.server_port is not None:
            return
        try:
            start_http_server(port, registry=self.registry)
        except OSError as e:
            logger.error(f"Failed to start metrics server on port {port}: {e}")
            raise
        self.server_port = port
        logger.info(f"Started Prometheus metrics server on port {port}")

    def track_entries_embedded(self, spec_id: str, count: int) -> None:
        if count:
            self.counters["entries_embedded"].labels(spec_id=spec_id).inc(count)

    def track_entries_skipped(self, spec_id: str, count: int) -> None:
        if count:
            self.counters["entries_skipped"].labels(spec_id=spec_id).inc(count)

    def track_batch_error(self) -> None:
        self.counters["provider_batch_errors"].inc()

    def track_operation_skipped(self, spec_id: str) -> None:
        self.counters["operations_skipped"].labels(spec_id=spec_id).inc()

    def track_search(self) -> None:
        self.counters["searches_performed"].inc()

    def set_token_map_size(self, spec_id: str, size: int) -> None:
        self.gauges["token_map_size"].labels(spec_id=spec_id).set(size)

    @contextmanager
    def search_timer(self) -> Iterator[None]:
        """Time a search and count it."""
        start_time = time.time()
        try:
            yield
        finally:
            self.histograms["search_latency"].observe(time.time() - start_time)
            self.track_search()

    def get_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Current value of a sample, e.g. `entries_embedded_total`."""
        return self.registry.get_sample_value(name, labels or {})

    def export(self) -> bytes:
        """Metrics in the Prometheus text format."""
        return generate_latest(self.registry)


__all__ = ["MetricsManager"]
