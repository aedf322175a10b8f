"""
Latency statistics models decoded from `$collStats` aggregation responses
"""

from collections.abc import Iterator, Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class HistogramBucket(BaseModel):
    """One latency histogram bucket: a micros boundary and its cumulative count"""

    boundary_micros: int = Field(..., ge=0, alias="micros")
    cumulative_count: float = Field(..., ge=0, alias="count")

    class Config:
        frozen = True
        populate_by_name = True


class OperationLatencyStat(BaseModel):
    """Latency totals and histogram for one operation category"""

    total_latency: float = Field(..., alias="latency")
    total_ops: float = Field(..., alias="ops")
    histogram: list[HistogramBucket] = Field(default_factory=list)

    class Config:
        frozen = True
        populate_by_name = True


# Document key -> exported "type" label, in export order
OPERATION_TYPES: tuple[tuple[str, str], ...] = (
    ("reads", "read"),
    ("writes", "write"),
    ("commands", "command"),
)


class LatencyStatsByOp(BaseModel):
    """Per-category stats; a category the server did not report stays None.

    Extra categories returned by newer servers (``transactions``) are ignored.
    """

    reads: OperationLatencyStat | None = None
    writes: OperationLatencyStat | None = None
    commands: OperationLatencyStat | None = None

    class Config:
        frozen = True

    def by_operation(self) -> Iterator[tuple[str, OperationLatencyStat]]:
        """Yield (type label, stat) for every present category in fixed order"""
        for field_name, op_type in OPERATION_TYPES:
            stat = getattr(self, field_name)
            if stat is not None:
                yield op_type, stat


class CollectionLatency(BaseModel):
    """Latency snapshot of a single collection.

    The aggregation response carries ``ns``, ``localTime`` and
    ``latencyStats`` only; the owning database and collection names are
    supplied by the caller through :meth:`from_document`.
    """

    database: str
    collection: str
    namespace: str = Field(..., alias="ns")
    captured_at: datetime = Field(..., alias="localTime")
    stats: LatencyStatsByOp = Field(..., alias="latencyStats")

    class Config:
        frozen = True
        populate_by_name = True

    @classmethod
    def from_document(
        cls, document: Mapping[str, Any], database: str, collection: str
    ) -> "CollectionLatency":
        """Decode an aggregation document, raising ValidationError on bad shape"""
        return cls.model_validate(
            {**document, "database": database, "collection": collection}
        )
