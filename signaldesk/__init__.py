# signaldesk/__init__.py
"""
Signaldesk - market data, technical indicators and AI commentary for a
trading dashboard.

Provides a pure-function indicator library, a short-lived indicator cache,
async market-data clients (Polygon, Binance) and an LLM analysis client.

Quick start:
    import asyncio
    from signaldesk import IndicatorCache, IndicatorService, PolygonClient

    async def main():
        async with PolygonClient(asset="stock") as client:
            service = IndicatorService(client, IndicatorCache(ttl=30))
            snapshot = await service.get_indicators("AAPL", "1h")
            print(snapshot.rsi14, snapshot.macd.hist)

    asyncio.run(main())

Or from the shell:
    signaldesk AAPL --timeframe 1h --plans
"""

from .analysis import AnalysisClient, AnalysisError
from .cache import IndicatorCache, make_key
from .config import load_config, settings
from .indicators import IndicatorSeries, IndicatorSet, calculate_indicators
from .marketdata import Candle, ChartHistory, candles_from_bars
from .providers import BinanceClient, Client, PolygonClient, ProviderError
from .service import IndicatorService

__version__ = "0.1.0"
__all__ = [
    "AnalysisClient",
    "AnalysisError",
    "BinanceClient",
    "Candle",
    "ChartHistory",
    "Client",
    "IndicatorCache",
    "IndicatorSeries",
    "IndicatorService",
    "IndicatorSet",
    "PolygonClient",
    "ProviderError",
    "calculate_indicators",
    "candles_from_bars",
    "load_config",
    "make_key",
    "settings",
]
