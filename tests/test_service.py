from unittest.mock import AsyncMock

import pytest

from signaldesk.cache import IndicatorCache
from signaldesk.indicators import IndicatorSet, calculate_indicators
from signaldesk.providers import ProviderError
from signaldesk.service import IndicatorService


@pytest.fixture
def client(make_candles):
    client = AsyncMock()
    client.get_historical_candles.return_value = make_candles(60)
    return client


class TestIndicatorService:
    @pytest.mark.asyncio
    async def test_computes_and_caches(self, client, clock, make_candles) -> None:
        cache = IndicatorCache(ttl=30, clock=clock)
        service = IndicatorService(client, cache)

        snapshot = await service.get_indicators("AAPL", "1h", 60)

        assert snapshot == calculate_indicators(make_candles(60))
        assert "AAPL-1h" in cache
        client.get_historical_candles.assert_awaited_once_with("AAPL", "1h", 60)

    @pytest.mark.asyncio
    async def test_fresh_cache_skips_fetch(self, client, clock) -> None:
        service = IndicatorService(client, IndicatorCache(ttl=30, clock=clock))

        first = await service.get_indicators("AAPL", "1h")
        clock.advance(10)
        second = await service.get_indicators("AAPL", "1h")

        assert second is first
        assert client.get_historical_candles.await_count == 1

    @pytest.mark.asyncio
    async def test_stale_cache_refetches(self, client, clock) -> None:
        service = IndicatorService(client, IndicatorCache(ttl=30, clock=clock))

        await service.get_indicators("AAPL", "1h")
        clock.advance(31)
        await service.get_indicators("AAPL", "1h")

        assert client.get_historical_candles.await_count == 2

    @pytest.mark.asyncio
    async def test_timeframes_cached_separately(self, client, clock) -> None:
        service = IndicatorService(client, IndicatorCache(clock=clock))

        await service.get_indicators("AAPL", "1h")
        await service.get_indicators("AAPL", "1d")

        assert client.get_historical_candles.await_count == 2

    @pytest.mark.asyncio
    async def test_provider_error_returns_neutral_uncached(self, client, clock) -> None:
        client.get_historical_candles.side_effect = ProviderError("HTTP 500", status=500)
        cache = IndicatorCache(clock=clock)
        service = IndicatorService(client, cache)

        snapshot = await service.get_indicators("AAPL", "1h")

        assert snapshot == IndicatorSet.neutral()
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_no_candles_returns_neutral_uncached(self, client, clock) -> None:
        client.get_historical_candles.return_value = []
        cache = IndicatorCache(clock=clock)
        service = IndicatorService(client, cache)

        snapshot = await service.get_indicators("AAPL", "1h")

        assert snapshot.rsi14 == 50.0
        assert snapshot.candle_count == 0
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_merges_into_chart_history(self, client, make_candles) -> None:
        service = IndicatorService(client, IndicatorCache(ttl=0))

        await service.get_indicators("AAPL", "1h", 60)
        client.get_historical_candles.return_value = make_candles(60, start=30)
        snapshot = await service.get_indicators("AAPL", "1h", 60)

        assert len(service.chart("AAPL", "1h")) == 90
        assert snapshot.candle_count == 60
        assert snapshot.price == make_candles(1, start=89)[0].close

    @pytest.mark.asyncio
    async def test_invalidate(self, client) -> None:
        cache = IndicatorCache()
        service = IndicatorService(client, cache)

        await service.get_indicators("AAPL", "1h")
        service.invalidate()

        assert len(cache) == 0

    def test_private_cache_by_default(self, client) -> None:
        service = IndicatorService(client)
        assert isinstance(service.cache, IndicatorCache)
        assert service.chart("AAPL", "1h") is service.chart("AAPL", "1h")
