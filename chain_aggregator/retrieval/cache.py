"""Per-network response cache keyed by request URL."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, NamedTuple

from cachetools import TLRUCache

logger = logging.getLogger(__name__)

DEFAULT_FLUSH_THRESHOLD = 100_000

# Entries larger than this many flush thresholds are never stored.
_HARD_CAP_FACTOR = 10


class _Entry(NamedTuple):
    payload: Any
    size: int
    ttl: float


def _entry_expiry(_key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


def _entry_size(entry: _Entry) -> int:
    return entry.size


class ResponseCache:
    """Size-accounted cache with a per-entry time-to-live.

    Size is measured in characters of the serialized response body. Nothing
    here awaits, so a size check followed by a flush cannot interleave with
    another task's insert.
    """

    def __init__(
        self,
        flush_threshold: int = DEFAULT_FLUSH_THRESHOLD,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.flush_threshold = flush_threshold
        self._cache: TLRUCache = TLRUCache(
            maxsize=flush_threshold * _HARD_CAP_FACTOR,
            ttu=_entry_expiry,
            timer=timer,
            getsizeof=_entry_size,
        )

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, url: str) -> bool:
        return url in self._cache

    @property
    def total_size(self) -> int:
        self._cache.expire()
        return int(self._cache.currsize)

    def get(self, url: str) -> Any | None:
        entry = self._cache.get(url)
        return entry.payload if entry is not None else None

    def put(self, url: str, payload: Any, size: int, ttl: float) -> None:
        if ttl <= 0:
            return
        try:
            self._cache[url] = _Entry(payload, max(size, 1), ttl)
        except ValueError:
            logger.debug("Response for %s too large to cache (%d)", url, size)

    def flush_if_oversized(self) -> bool:
        """Drop every entry when total size exceeds the threshold."""
        size = self.total_size
        if size > self.flush_threshold:
            logger.debug(
                "Flushing response cache (%d > %d)", size, self.flush_threshold
            )
            self._cache.clear()
            return True
        return False

    def clear(self) -> None:
        self._cache.clear()
