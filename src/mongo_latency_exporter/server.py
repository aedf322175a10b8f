"""
Process entry point serving the latency metrics over HTTP
"""

import signal
import threading

from prometheus_client import CollectorRegistry, start_http_server

from .config.settings import settings
from .monitoring.metrics import LatencyMetricsCollector
from .storage.mongo import MongoLatencySource
from .utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


class LatencyExporterServer:
    """Owns the MongoDB source, the registry and the HTTP listener"""

    def __init__(self, source: MongoLatencySource | None = None):
        self.source = source or MongoLatencySource(settings.mongodb)
        self.registry = CollectorRegistry()
        self.metrics_collector: LatencyMetricsCollector | None = None
        self._stop = threading.Event()
        self._http_server = None

    def initialize(self) -> None:
        self.source.initialize()
        self.metrics_collector = LatencyMetricsCollector(
            self.source,
            namespace=settings.exporter.namespace,
            scrape_timeout=settings.exporter.scrape_timeout_seconds,
            registry=self.registry,
        )

    def serve(self) -> None:
        """Start the HTTP listener and block until stop() is called"""
        if self.metrics_collector is None:
            self.initialize()

        self._http_server, _ = start_http_server(
            settings.exporter.port,
            addr=settings.exporter.host,
            registry=self.registry,
        )
        logger.info(
            "Serving latency metrics",
            host=settings.exporter.host,
            port=settings.exporter.port,
            app_version=settings.app_version,
        )
        self._stop.wait()

    def stop(self, *_args) -> None:
        self._stop.set()

    def cleanup(self) -> None:
        if self._http_server is not None:
            self._http_server.shutdown()
            self._http_server = None
        self.source.cleanup()
        logger.info("Latency exporter stopped")


def main():
    """Main entry point"""
    setup_logging()
    exporter_server = LatencyExporterServer()

    signal.signal(signal.SIGINT, exporter_server.stop)
    signal.signal(signal.SIGTERM, exporter_server.stop)

    try:
        exporter_server.initialize()
        if not exporter_server.source.health_check():
            logger.warning("MongoDB not reachable yet, scrapes will report failures")
        exporter_server.serve()
    finally:
        exporter_server.cleanup()


if __name__ == "__main__":
    main()
