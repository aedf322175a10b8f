"""
Discovery and retrieval of per-collection latency statistics
"""

import threading
import time
from collections.abc import Iterable, Mapping
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any, Protocol

from bson.errors import BSONError
from prometheus_client import Counter
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from ..models.latency import CollectionLatency
from ..utils.logging import ContextualLogger, get_logger
from .suppression import (
    DATABASE_LISTING_SCOPE,
    ErrorSuppressionRegistry,
    collection_scope,
)

logger = get_logger(__name__)

SUPPRESSION_NOTICE = "This log message will be suppressed from now."


class LatencySource(Protocol):
    """Database calls a scrape depends on (see storage.MongoLatencySource)"""

    def list_database_names(self) -> list[str]: ...

    def list_collections(
        self, database: str
    ) -> AbstractContextManager[Iterable[Mapping[str, Any]]]: ...

    def aggregate_latency_stats(
        self, database: str, collection: str
    ) -> AbstractContextManager[Iterable[Mapping[str, Any]]]: ...


@dataclass
class ScrapeResult:
    """Outcome of one scrape.

    ``discovery_ok`` is False when the database listing itself failed, which
    tells that case apart from a server with nothing to report.
    """

    records: list[CollectionLatency] = field(default_factory=list)
    discovery_ok: bool = True
    cancelled: bool = False


class CollectionLatencyCollector:
    """Walks databases and collections and gathers their latency snapshots"""

    def __init__(
        self,
        source: LatencySource,
        suppression: ErrorSuppressionRegistry | None = None,
        error_counter: Counter | None = None,
    ):
        self.source = source
        self.suppression = (
            suppression if suppression is not None else ErrorSuppressionRegistry()
        )
        self.error_counter = error_counter

    def collect_all(
        self,
        cancel_event: threading.Event | None = None,
        timeout: float | None = None,
    ) -> list[CollectionLatency]:
        """Collect latency records for every reachable collection; never raises"""
        return self.scrape(cancel_event=cancel_event, timeout=timeout).records

    def scrape(
        self,
        cancel_event: threading.Event | None = None,
        timeout: float | None = None,
    ) -> ScrapeResult:
        """
        Run one scrape.

        Args:
            cancel_event: Set by the caller to abandon the remaining scopes
            timeout: Overall budget in seconds, checked between scopes

        Returns:
            ScrapeResult holding every record decoded before completion,
            cancellation or the deadline
        """
        logger.info("Starting latency collection")
        deadline = time.monotonic() + timeout if timeout is not None else None
        result = ScrapeResult()

        try:
            database_names = self.source.list_database_names()
        except (PyMongoError, BSONError) as e:
            self._report_failure(
                logger,
                DATABASE_LISTING_SCOPE,
                "list_databases",
                e,
                "Collection latency stats will not be collected.",
            )
            result.discovery_ok = False
            return result
        self.suppression.clear(DATABASE_LISTING_SCOPE)

        for database in database_names:
            if self._should_stop(cancel_event, deadline):
                result.cancelled = True
                break

            collection_names = self._list_collection_names(database)
            if collection_names is None:
                continue

            for collection in collection_names:
                if self._should_stop(cancel_event, deadline):
                    result.cancelled = True
                    break
                result.records.extend(self._collect_collection(database, collection))

            if result.cancelled:
                break

        if result.cancelled:
            logger.warning(
                "Latency collection cancelled, returning partial results",
                records=len(result.records),
            )
        else:
            logger.info("Finished latency collection", records=len(result.records))
        return result

    def _list_collection_names(self, database: str) -> list[str] | None:
        """Read the whole collection listing before any aggregation runs"""
        log = logger.bind(database=database, scope=database)
        names = []
        try:
            with self.source.list_collections(database) as cursor:
                for item in cursor:
                    name = item.get("name") if isinstance(item, Mapping) else None
                    if not name:
                        log.warning("Skipping malformed collection listing entry")
                        continue
                    names.append(name)
        except (PyMongoError, BSONError) as e:
            self._report_failure(
                log,
                database,
                "list_collections",
                e,
                "Collection latency stats will not be collected for this db.",
            )
            return None

        self.suppression.clear(database)
        return names

    def _collect_collection(
        self, database: str, collection: str
    ) -> list[CollectionLatency]:
        scope = collection_scope(database, collection)
        log = logger.bind(database=database, collection=collection, scope=scope)
        log.debug("Collecting latency info")
        records = []

        try:
            with self.source.aggregate_latency_stats(database, collection) as cursor:
                for document in cursor:
                    record = self._decode(log, document, database, collection)
                    if record is not None:
                        records.append(record)
        except PyMongoError as e:
            self._report_failure(
                log,
                scope,
                "aggregate",
                e,
                "Collection latency stats will not be collected for this collection.",
            )
            return records
        except BSONError as e:
            self._report_failure(
                log,
                scope,
                "decode",
                e,
                "Collection latency stats will not be collected for this collection.",
            )
            return records

        # Only a cursor read to the end counts as recovery
        if records:
            self.suppression.clear(scope)
        return records

    def _decode(
        self,
        log: ContextualLogger,
        document: Mapping[str, Any],
        database: str,
        collection: str,
    ) -> CollectionLatency | None:
        try:
            return CollectionLatency.from_document(document, database, collection)
        except (ValidationError, TypeError) as e:
            log.warning(
                "Could not decode collection latency document, skipping it",
                error=str(e),
            )
            self._count_error("decode")
            return None

    def _report_failure(
        self,
        log: ContextualLogger,
        scope: str,
        stage: str,
        error: Exception,
        consequence: str,
    ) -> None:
        self._count_error(stage)
        if self.suppression.should_report(scope):
            log.warning(
                f"{error}. {consequence} {SUPPRESSION_NOTICE}",
                scope=scope,
                stage=stage,
                error_type=type(error).__name__,
            )

    def _count_error(self, stage: str) -> None:
        if self.error_counter is not None:
            self.error_counter.labels(stage=stage).inc()

    @staticmethod
    def _should_stop(
        cancel_event: threading.Event | None, deadline: float | None
    ) -> bool:
        if cancel_event is not None and cancel_event.is_set():
            return True
        return deadline is not None and time.monotonic() >= deadline
