"""
Log-once bookkeeping for scrape failures
"""

import threading

# Scope key used for the database listing itself
DATABASE_LISTING_SCOPE = ""


def collection_scope(database: str, collection: str) -> str:
    """Scope key of a per-collection aggregation"""
    return f"{database}.{collection}"


class ErrorSuppressionRegistry:
    """Remembers which failure scopes have already been reported.

    Scopes are ``""`` for the database listing, a database name for its
    collection listing and ``"<db>.<coll>"`` for a collection's aggregation.
    A scope is marked the first time it fails and forgotten as soon as it
    succeeds again, so only currently failing scopes are ever held.
    """

    def __init__(self):
        self._reported: dict[str, bool] = {}
        self._lock = threading.Lock()

    def should_report(self, scope: str) -> bool:
        """Mark ``scope`` as failing; True only if it was not already marked"""
        with self._lock:
            if self._reported.get(scope):
                return False
            self._reported[scope] = True
            return True

    def clear(self, scope: str) -> None:
        """Forget ``scope`` after a successful call"""
        with self._lock:
            self._reported.pop(scope, None)

    def is_suppressed(self, scope: str) -> bool:
        with self._lock:
            return self._reported.get(scope, False)

    def scopes(self) -> list[str]:
        with self._lock:
            return list(self._reported)

    def __contains__(self, scope: object) -> bool:
        with self._lock:
            return scope in self._reported

    def __len__(self) -> int:
        with self._lock:
            return len(self._reported)
