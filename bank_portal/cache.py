"""
Query Cache Module

In-process cache for table reads, keyed by tuples such as
``("accounts", user_id)``. Mutations invalidate by key prefix so the next read
refetches from the backend. Failed fetches are never cached, and an
invalidation never touches entries outside its prefix.
"""

import copy
import logging
import threading
from typing import Any, Callable, Dict, Tuple, TypeVar

logger = logging.getLogger("bank_portal.cache")

T = TypeVar("T")


class QueryCache:
    """Thread-safe cache-and-refetch store for query results"""

    def __init__(self):
        self._entries: Dict[Tuple, Any] = {}
        self._lock = threading.RLock()
        self.fetch_count = 0

    def get_or_fetch(self, key: Tuple, fetcher: Callable[[], T]) -> T:
        """Return the cached value for key, fetching and storing it on a miss"""
        with self._lock:
            if key in self._entries:
                return copy.deepcopy(self._entries[key])

        value = fetcher()

        with self._lock:
            self.fetch_count += 1
            self._entries[key] = copy.deepcopy(value)
        return value

    def peek(self, key: Tuple) -> Any:
        """Return the cached value without fetching (None on miss)"""
        with self._lock:
            value = self._entries.get(key)
            return copy.deepcopy(value)

    def invalidate(self, *prefix: Any) -> int:
        """Drop every entry whose key starts with prefix; returns how many were dropped"""
        size = len(prefix)
        with self._lock:
            doomed = [key for key in self._entries if key[:size] == prefix]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug(f"Invalidated {len(doomed)} cache entr{'y' if len(doomed) == 1 else 'ies'} for {prefix}")
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: Tuple) -> bool:
        with self._lock:
            return key in self._entries
