"""
In-memory cache adapter.

Bucketed key/value store shared across requests of one process. A lock
guards every access so concurrent request threads see consistent buckets.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

logger = logging.getLogger(__name__)


class InMemoryCache:
    """Process-local implementation of CachePort."""

    def __init__(self) -> None:
        self._buckets: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str, bucket: str = "default") -> Any | None:
        with self._lock:
            return self._buckets.get(bucket, {}).get(key)

    def set(self, key: str, value: Any, bucket: str = "default") -> None:
        with self._lock:
            self._buckets.setdefault(bucket, {})[key] = value

    def delete(self, key: str, bucket: str = "default") -> bool:
        with self._lock:
            return self._buckets.get(bucket, {}).pop(key, None) is not None

    def flush_bucket(self, bucket: str) -> int:
        """Drop every key in a bucket; returns how many were dropped."""
        with self._lock:
            dropped = len(self._buckets.pop(bucket, {}))
        if dropped:
            logger.debug("Flushed %d cache entries from bucket %s", dropped, bucket)
        return dropped

    def size(self, bucket: str = "default") -> int:
        with self._lock:
            return len(self._buckets.get(bucket, {}))
