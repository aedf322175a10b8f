"""
Models package initialization.

Exports:
- CollectionLatency: Latency snapshot of one collection.
- LatencyStatsByOp, OperationLatencyStat, HistogramBucket: its building blocks.
"""

from .latency import (
    OPERATION_TYPES,
    CollectionLatency,
    HistogramBucket,
    LatencyStatsByOp,
    OperationLatencyStat,
)

__all__ = [
    "OPERATION_TYPES",
    "CollectionLatency",
    "HistogramBucket",
    "LatencyStatsByOp",
    "OperationLatencyStat",
]
