"""
Conversion of collection latency records into Prometheus samples
"""

from collections.abc import Iterable

from prometheus_client import Gauge
from prometheus_client.metrics_core import Metric

from ..models.latency import CollectionLatency
from ..utils.logging import get_logger

logger = get_logger(__name__)

HISTOGRAM_LABELS = ("db", "coll", "type", "micros")


class LatencyHistogramExporter:
    """Owns the ``<namespace>_db_coll_latencies_histogram`` gauge family.

    Bucket boundaries are a label dimension rather than native histogram
    buckets, so the family is rebuilt on every export; series for collections
    or boundaries that disappeared are dropped.
    """

    def __init__(self, namespace: str = "mongodb"):
        # Not registered anywhere: samples are handed out by export()
        self.histogram = Gauge(
            "db_coll_latencies_histogram",
            "collection latencies histogram statistics of mongod",
            HISTOGRAM_LABELS,
            namespace=namespace,
            registry=None,
        )

    def describe(self) -> list[Metric]:
        """Static descriptor of the histogram family"""
        return self.histogram.describe()

    def export(self, records: Iterable[CollectionLatency]) -> list[Metric]:
        """Reset the family, load ``records`` into it and return its samples"""
        logger.info("Starting export of latency collections")
        self.histogram.clear()

        for record in records:
            for op_type, stat in record.stats.by_operation():
                for bucket in stat.histogram:
                    self.histogram.labels(
                        db=record.database,
                        coll=record.collection,
                        type=op_type,
                        micros=str(bucket.boundary_micros),
                    ).set(bucket.cumulative_count)

        return self.histogram.collect()
