"""
Prometheus collector wiring the latency scrape into a registry
"""

import threading
import time
from collections.abc import Iterator

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest
from prometheus_client.metrics_core import Metric

from ..config.settings import settings
from ..utils.logging import get_logger
from .collector import CollectionLatencyCollector, LatencySource, ScrapeResult
from .exporter import LatencyHistogramExporter
from .suppression import ErrorSuppressionRegistry

logger = get_logger(__name__)


class LatencyMetricsCollector:
    """Custom Prometheus collector: one latency scrape per registry collect.

    Scrapes are single-flight; a second concurrent collect waits for the
    running one to finish.
    """

    def __init__(
        self,
        source: LatencySource,
        namespace: str | None = None,
        scrape_timeout: float | None = None,
        registry: CollectorRegistry | None = None,
    ):
        self.namespace = namespace or settings.exporter.namespace
        self.scrape_timeout = (
            scrape_timeout
            if scrape_timeout is not None
            else settings.exporter.scrape_timeout_seconds
        )
        self._lock = threading.Lock()

        self._init_prometheus_metrics()

        self.suppression = ErrorSuppressionRegistry()
        self.collector = CollectionLatencyCollector(
            source, suppression=self.suppression, error_counter=self.scrape_errors
        )
        self.exporter = LatencyHistogramExporter(namespace=self.namespace)
        self.registry = registry
        if registry is not None:
            registry.register(self)

    def _init_prometheus_metrics(self):
        """Scrape health metrics, yielded alongside the histogram family"""
        self.scrape_duration = Gauge(
            "latency_scrape_duration_seconds",
            "Time spent collecting collection latency statistics",
            namespace=self.namespace,
            registry=None,
        )

        self.scrape_errors = Counter(
            "latency_scrape_errors",
            "Failures while collecting collection latency statistics",
            ["stage"],
            namespace=self.namespace,
            registry=None,
        )

        self.discovery_up = Gauge(
            "latency_discovery_up",
            "Whether the last scrape could list databases",
            namespace=self.namespace,
            registry=None,
        )

    def _own_metrics(self) -> list[Metric]:
        return [
            *self.scrape_duration.collect(),
            *self.scrape_errors.collect(),
            *self.discovery_up.collect(),
        ]

    def describe(self) -> Iterator[Metric]:
        yield from self.exporter.describe()
        yield from self.scrape_duration.describe()
        yield from self.scrape_errors.describe()
        yield from self.discovery_up.describe()

    def collect(self) -> Iterator[Metric]:
        with self._lock:
            start = time.monotonic()
            try:
                result = self.collector.scrape(timeout=self.scrape_timeout)
            except Exception as e:
                logger.error("Unexpected error during latency scrape", error=str(e))
                result = ScrapeResult(discovery_ok=False)

            self.scrape_duration.set(time.monotonic() - start)
            self.discovery_up.set(1 if result.discovery_ok else 0)
            metrics = [*self.exporter.export(result.records), *self._own_metrics()]

        yield from metrics

    def get_prometheus_metrics(self) -> str:
        """Get Prometheus metrics in text format"""
        registry = self.registry
        if registry is None:
            registry = CollectorRegistry()
            registry.register(self)
        return generate_latest(registry).decode("utf-8")
