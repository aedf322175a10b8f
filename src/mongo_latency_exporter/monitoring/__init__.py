"""
Monitoring package initialization.

Exports:
- CollectionLatencyCollector: Database/collection discovery and stat retrieval.
- LatencyHistogramExporter: Flattens latency records into Prometheus samples.
- LatencyMetricsCollector: Prometheus custom collector tying both together.
- ErrorSuppressionRegistry: Log-once memory for failing scrape scopes.
"""

from .collector import CollectionLatencyCollector, ScrapeResult
from .exporter import LatencyHistogramExporter
from .metrics import LatencyMetricsCollector
from .suppression import ErrorSuppressionRegistry

__all__ = [
    "CollectionLatencyCollector",
    "ErrorSuppressionRegistry",
    "LatencyHistogramExporter",
    "LatencyMetricsCollector",
    "ScrapeResult",
]
