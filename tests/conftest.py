"""
Test configuration and fixtures for the MongoDB latency exporter
"""

# Standard library imports
from datetime import datetime, timezone
from typing import Any

# Third-party imports
import pytest
from pymongo.errors import OperationFailure

# Local imports
from mongo_latency_exporter.config.settings import Settings
from mongo_latency_exporter.models.latency import CollectionLatency

LOCAL_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeCursor:
    """Iterable context manager standing in for a pymongo CommandCursor"""

    def __init__(
        self,
        documents: list[Any],
        fail_after: int | None = None,
        error: Exception | None = None,
    ):
        self.documents = documents
        self.fail_after = fail_after
        self.error = error or OperationFailure("cursor died")
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.closed = True

    def __iter__(self):
        for index, document in enumerate(self.documents):
            if self.fail_after is not None and index >= self.fail_after:
                raise self.error
            yield document
        if self.fail_after is not None and self.fail_after >= len(self.documents):
            raise self.error


class FakeLatencySource:
    """In-memory database layout with injectable failures.

    ``layout`` maps database -> collection -> list of aggregation documents.
    Failures are exceptions (or cursors) keyed by database or ``db.coll``.
    """

    def __init__(self, layout: dict[str, dict[str, list[Any]]]):
        self.layout = layout
        self.list_databases_error: Exception | None = None
        self.list_collections_errors: dict[str, Exception] = {}
        self.aggregate_errors: dict[str, Exception] = {}
        self.collection_cursors: dict[str, FakeCursor] = {}
        self.aggregate_cursors: dict[str, FakeCursor] = {}
        self.opened: list[FakeCursor] = []
        self.aggregate_calls: list[str] = []

    def list_database_names(self) -> list[str]:
        if self.list_databases_error is not None:
            raise self.list_databases_error
        return list(self.layout)

    def list_collections(self, database: str) -> FakeCursor:
        if database in self.list_collections_errors:
            raise self.list_collections_errors[database]
        cursor = self.collection_cursors.get(database) or FakeCursor(
            [{"name": name, "type": "collection"} for name in self.layout[database]]
        )
        self.opened.append(cursor)
        return cursor

    def aggregate_latency_stats(self, database: str, collection: str) -> FakeCursor:
        scope = f"{database}.{collection}"
        self.aggregate_calls.append(scope)
        if scope in self.aggregate_errors:
            raise self.aggregate_errors[scope]
        cursor = self.aggregate_cursors.get(scope) or FakeCursor(
            self.layout[database][collection]
        )
        self.opened.append(cursor)
        return cursor


def latency_document(
    namespace: str,
    reads: list[tuple[int, int]] | None = None,
    writes: list[tuple[int, int]] | None = None,
    commands: list[tuple[int, int]] | None = None,
) -> dict[str, Any]:
    """Build a `$collStats` latencyStats response document"""

    def op_stat(buckets):
        return {
            "latency": sum(micros * count for micros, count in buckets),
            "ops": sum(count for _, count in buckets),
            "histogram": [{"micros": micros, "count": count} for micros, count in buckets],
        }

    latency_stats = {}
    if reads is not None:
        latency_stats["reads"] = op_stat(reads)
    if writes is not None:
        latency_stats["writes"] = op_stat(writes)
    if commands is not None:
        latency_stats["commands"] = op_stat(commands)

    return {"ns": namespace, "localTime": LOCAL_TIME, "latencyStats": latency_stats}


@pytest.fixture
def test_settings() -> Settings:
    """Test settings configuration"""
    return Settings(
        environment="testing",
        log_level="DEBUG",
        exporter={"namespace": "test", "scrape_timeout_seconds": 5.0},
    )


@pytest.fixture
def sample_layout() -> dict[str, dict[str, list[Any]]]:
    """Two databases with a couple of collections each"""
    return {
        "shop": {
            "orders": [latency_document("shop.orders", reads=[(0, 5), (100, 9)])],
            "users": [
                latency_document(
                    "shop.users", writes=[(64, 2)], commands=[(128, 1), (256, 3)]
                )
            ],
        },
        "analytics": {
            "events": [latency_document("analytics.events", reads=[(512, 7)])],
        },
    }


@pytest.fixture
def fake_source(sample_layout) -> FakeLatencySource:
    return FakeLatencySource(sample_layout)


@pytest.fixture
def source_factory():
    """Factory for fake sources over a custom layout"""
    return FakeLatencySource


@pytest.fixture
def latency_doc():
    """Factory for aggregation response documents"""
    return latency_document


@pytest.fixture
def make_cursor():
    """Factory for fake command cursors"""
    return FakeCursor


@pytest.fixture
def reads_only_record() -> CollectionLatency:
    """Record with reads histogram [(0, 5), (100, 9)] and nothing else"""
    return CollectionLatency.from_document(
        latency_document("db.coll", reads=[(0, 5), (100, 9)]),
        database="db",
        collection="coll",
    )


# Markers for different test categories
def pytest_configure(config):
    """Configure pytest markers"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
