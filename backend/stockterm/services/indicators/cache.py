"""
In-memory result cache for indicator calculations.

Keys are fingerprints of (candle series, parameters). Entries expire after
`max_age` seconds; when full, the oldest-inserted entry is evicted. A hit
does not refresh an entry's position.
"""

import json
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from stockterm.core.config import settings
from stockterm.schemas.indicators import IndicatorResult
from stockterm.schemas.market import Candle

logger = logging.getLogger(__name__)


def data_hash(candles: Sequence[Candle]) -> str:
    """
    Cheap series fingerprint: length, first/last timestamp and last close.

    Two series that differ only in interior bars collide; callers that edit
    history in place must clear the cache.
    """
    if not candles:
        return "0"
    first, last = candles[0], candles[-1]
    return f"{len(candles)}-{first.timestamp_seconds()}-{last.timestamp_seconds()}-{last.close}"


def make_fingerprint(short_name: str, candles: Sequence[Candle], params: dict[str, Any]) -> str:
    """Cache key for one (indicator, series, params) combination."""
    return f"{short_name}-{data_hash(candles)}-{json.dumps(params, sort_keys=True, default=str)}"


@dataclass
class CacheEntry:
    result: IndicatorResult
    stored_at: float


class IndicatorCache:
    """
    Bounded, time-limited store of indicator results.

    Thread-safe; the clock is injectable so tests can force expiry.
    """

    def __init__(
        self,
        max_size: Optional[int] = None,
        max_age: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.max_size = max_size if max_size is not None else settings.indicator_cache_max_size
        self.max_age = max_age if max_age is not None else settings.indicator_cache_max_age_seconds
        self._clock = clock or time.monotonic
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[IndicatorResult]:
        """Return the cached result, dropping it if expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None

            if self._clock() - entry.stored_at > self.max_age:
                del self._entries[key]
                self.misses += 1
                logger.debug(f"Cache entry expired: {key}")
                return None

            self.hits += 1
            return entry.result

    def put(self, key: str, result: IndicatorResult) -> None:
        """Store a result, evicting the oldest entry when full."""
        if self.max_size < 1:
            return
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            while len(self._entries) >= self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Cache full, evicted: {evicted}")
            self._entries[key] = CacheEntry(result=result, stored_at=self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def stats(self) -> dict[str, Any]:
        """Cache statistics."""
        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "max_age": self.max_age,
            "hits": self.hits,
            "misses": self.misses,
        }
