# signaldesk/service.py
"""
Indicator service: fetch candles, compute the indicator snapshot, cache it.
"""

import logging

from signaldesk.cache import IndicatorCache, make_key
from signaldesk.indicators import IndicatorSet, calculate_indicators
from signaldesk.marketdata import ChartHistory
from signaldesk.providers import Client, ProviderError

log = logging.getLogger(__name__)


class IndicatorService:
    """
    Serves IndicatorSets per (symbol, timeframe).

    Fresh snapshots come from the cache; otherwise candles are fetched from the
    provider, merged into a rolling ChartHistory and recomputed. A failed
    upstream fetch is logged and answered with the neutral IndicatorSet so
    that callers can always render something; failures are never cached.

    Args:
        client: Started market-data provider client
        cache: Cache shared with other callers (a private one is created if omitted)
        history_length: Candles retained per chart
    """

    def __init__(
        self,
        client: Client,
        cache: IndicatorCache | None = None,
        history_length: int = 500,
    ) -> None:
        self.client = client
        self.cache = cache if cache is not None else IndicatorCache()
        self.history_length = history_length
        self.charts: dict[tuple[str, str], ChartHistory] = {}

    def chart(self, symbol: str, timeframe: str) -> ChartHistory:
        key = (symbol, timeframe)
        if key not in self.charts:
            self.charts[key] = ChartHistory(symbol, timeframe, self.history_length)
        return self.charts[key]

    async def get_indicators(
        self, symbol: str, timeframe: str, limit: int = 200
    ) -> IndicatorSet:
        key = make_key(symbol, timeframe)

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            candles = await self.client.get_historical_candles(symbol, timeframe, limit)
        except ProviderError as e:
            log.warning("Falling back to neutral indicators for %s: %s", key, e)
            return IndicatorSet.neutral()

        if not candles:
            log.warning("No candles returned for %s", key)
            return IndicatorSet.neutral()

        chart = self.chart(symbol, timeframe)
        chart.extend(candles)

        snapshot = calculate_indicators(chart.get_candles(limit))
        self.cache.set(key, snapshot)

        log.info(
            "Computed indicators for %s from %d candles (RSI %.1f)",
            key,
            snapshot.candle_count,
            snapshot.rsi14,
        )
        return snapshot

    def invalidate(self) -> None:
        """Drop every cached snapshot."""
        self.cache.clear()
