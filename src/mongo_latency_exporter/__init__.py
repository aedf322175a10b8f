"""
MongoDB Latency Exporter - Prometheus exporter for per-collection latency histograms

Discovers every database and collection of a running mongod, reads the
``$collStats`` latency histograms of each collection and republishes them as
the ``<namespace>_db_coll_latencies_histogram`` gauge family.
"""

__version__ = "1.0.0"

from .config.settings import Settings

__all__ = ["Settings"]
