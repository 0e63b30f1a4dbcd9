"""Print indicator snapshots and trade plans for a small watchlist."""
import asyncio
import logging

from signaldesk import BinanceClient, IndicatorCache, IndicatorService
from signaldesk.indicators import calculate_donchian
from signaldesk.rules import generate_trade_plans, lookback_for
from signaldesk.runner import configure_logging

log = logging.getLogger(__name__)

WATCHLIST = ["BTC", "ETH", "SOL"]
TIMEFRAME = "1h"


async def main() -> None:
    configure_logging("INFO")
    cache = IndicatorCache(ttl=30)
    limit = lookback_for(TIMEFRAME)

    async with BinanceClient() as client:
        service = IndicatorService(client, cache)

        for symbol in WATCHLIST:
            snapshot = await service.get_indicators(symbol, TIMEFRAME, limit)
            if snapshot.candle_count == 0:
                log.warning("%s: no data", symbol)
                continue

            candles = service.chart(symbol, TIMEFRAME).get_candles(limit)
            plans = generate_trade_plans(snapshot, calculate_donchian(candles), candles)

            log.info(
                "%s price=%.2f RSI=%.1f MACD hist=%.4f ATR=%.2f",
                symbol,
                snapshot.price,
                snapshot.rsi14,
                snapshot.macd.hist,
                snapshot.atr14,
            )
            log.info(
                "%s %s (%d%%) swing stop=%.2f targets=%s",
                symbol,
                plans.direction,
                plans.confidence,
                plans.swing.stop,
                plans.swing.targets,
            )


if __name__ == "__main__":
    asyncio.run(main())
