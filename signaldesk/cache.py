# signaldesk/cache.py
"""
Short-lived in-memory cache for computed indicators.

Avoids redundant upstream fetches for the same (symbol, timeframe) pair within
a freshness window. Instances are passed explicitly to whatever needs them;
there is no module-level cache.

Example:
    cache = IndicatorCache(ttl=30.0)
    key = make_key("AAPL", "1h")

    snapshot = cache.get(key)
    if snapshot is None:
        snapshot = calculate_indicators(candles)
        cache.set(key, snapshot)
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

log = logging.getLogger(__name__)

DEFAULT_TTL = 30.0  # seconds


def make_key(symbol: str, timeframe: str) -> str:
    """Cache key for a symbol/timeframe pair, e.g. "AAPL-1h"."""
    return f"{symbol}-{timeframe}"


@dataclass
class _Entry:
    value: Any
    stored_at: float


class IndicatorCache:
    """
    TTL map with lazy eviction.

    An entry is fresh while its age is strictly below `ttl`; a stale entry is
    removed the next time it is read. Not thread-safe: callers run on a single
    event loop and no method awaits mid-mutation.

    Args:
        ttl: Freshness window in seconds (default: 30)
        clock: Zero-argument callable returning seconds; injectable for tests
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = float(ttl)
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    def get(self, key: str) -> Any | None:
        """Return the cached value if still fresh, otherwise evict it and return None."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        age = self._clock() - entry.stored_at
        if age < self.ttl:
            log.debug("Cache hit for %s (age %.1fs)", key, age)
            return entry.value

        del self._entries[key]
        log.debug("Cache entry for %s expired (age %.1fs)", key, age)
        return None

    def set(self, key: str, value: Any) -> None:
        """Store `value` stamped with the current clock reading."""
        self._entries[key] = _Entry(value=value, stored_at=self._clock())
        log.debug("Cached %s", key)

    def clear(self) -> None:
        """Remove every entry."""
        self._entries.clear()
        log.debug("Indicator cache cleared")

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"IndicatorCache(ttl={self.ttl}, entries={len(self)})"
