"""
Storage package initialization.

Exports:
- MongoLatencySource: MongoDB client wrapper used by the latency collector.
"""

from .mongo import LATENCY_STATS_PIPELINE, MongoLatencySource

__all__ = ["LATENCY_STATS_PIPELINE", "MongoLatencySource"]
