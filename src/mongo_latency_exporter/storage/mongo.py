"""
MongoDB access for latency collection
"""

from typing import Any

from pymongo import MongoClient
from pymongo.command_cursor import CommandCursor
from pymongo.errors import PyMongoError

from ..config.settings import MongoSettings
from ..config.settings import settings as default_settings
from ..utils.logging import get_logger

logger = get_logger(__name__)

LATENCY_STATS_PIPELINE: list[dict[str, Any]] = [
    {"$collStats": {"latencyStats": {"histograms": True}}}
]


class MongoLatencySource:
    """Thin wrapper over a MongoClient exposing the calls a scrape needs.

    Every call is bounded by the client-level timeouts configured in
    :class:`MongoSettings`; cursors returned here are context managers and
    must be closed by the caller.
    """

    def __init__(
        self,
        mongo_settings: MongoSettings | None = None,
        client: MongoClient | None = None,
    ):
        self.settings = mongo_settings or default_settings.mongodb
        self.client = client
        self._initialized = client is not None

    def client_options(self) -> dict[str, Any]:
        """Keyword options for MongoClient derived from settings"""
        options: dict[str, Any] = {
            "appname": self.settings.app_name,
            "serverSelectionTimeoutMS": self.settings.server_selection_timeout_ms,
            "connectTimeoutMS": self.settings.connect_timeout_ms,
        }
        if self.settings.operation_timeout_ms is not None:
            options["timeoutMS"] = self.settings.operation_timeout_ms
        else:
            options["socketTimeoutMS"] = self.settings.socket_timeout_ms
        return options

    def aggregate_options(self) -> dict[str, Any]:
        # maxTimeMS is derived from timeoutMS when the latter is configured
        if self.settings.operation_timeout_ms is not None:
            return {}
        return {"maxTimeMS": self.settings.aggregate_max_time_ms}

    def initialize(self):
        """Create the MongoClient (connection happens lazily on first use)"""
        if self._initialized:
            return

        try:
            logger.info("Initializing MongoDB client", app_name=self.settings.app_name)
            self.client = MongoClient(self.settings.uri, **self.client_options())
            self._initialized = True
        except PyMongoError as e:
            logger.error("Failed to initialize MongoDB client", error=str(e))
            raise

    def cleanup(self):
        """Close client connections"""
        if self.client is not None:
            self.client.close()
            self.client = None
            self._initialized = False
            logger.info("MongoDB connections closed")

    def _require_client(self) -> MongoClient:
        if not self._initialized:
            self.initialize()
        return self.client

    def list_database_names(self) -> list[str]:
        return self._require_client().list_database_names()

    def list_collections(self, database: str) -> CommandCursor:
        """Name-only collection listing; yields ``{"name", "type"}`` documents"""
        return self._require_client()[database].list_collections(
            nameOnly=True, authorizedCollections=True
        )

    def aggregate_latency_stats(self, database: str, collection: str) -> CommandCursor:
        """Run the ``$collStats`` latency pipeline against one collection"""
        return self._require_client()[database][collection].aggregate(
            LATENCY_STATS_PIPELINE, **self.aggregate_options()
        )

    def health_check(self) -> bool:
        """Check that the server answers a ping"""
        try:
            self._require_client().admin.command("ping")
            return True
        except PyMongoError as e:
            logger.error("MongoDB health check failed", error=str(e))
            return False

    def __enter__(self) -> "MongoLatencySource":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()
