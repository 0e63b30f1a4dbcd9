# signaldesk/providers/binance/client.py
import asyncio
import logging
from typing import Any

import aiohttp

from signaldesk.config import settings
from signaldesk.marketdata import Candle, epoch_to_iso
from signaldesk.providers.base import Client, ProviderError

log = logging.getLogger(__name__)


class BinanceClient(Client):
    """Public (unauthenticated) Binance spot klines client."""

    REQUEST_TIMEOUT = 10.0
    MAX_LIMIT = 1000

    INTERVALS = {
        "1m", "3m", "5m", "15m", "30m",
        "1h", "2h", "4h", "6h", "8h", "12h",
        "1d", "3d", "1w", "1M",
    }
    ALIASES = {
        "1min": "1m",
        "5min": "5m",
        "15min": "15m",
        "30min": "30m",
        "60m": "1h",
        "240m": "4h",
        "D": "1d",
    }

    def __init__(self, base_url: str | None = None) -> None:
        self.base_url = (base_url or settings.binance_base_url).rstrip("/")
        self.headers = {"Accept": "application/json"}
        self._session: aiohttp.ClientSession | None = None

    async def start(self) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession(headers=self.headers)

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    @staticmethod
    def binance_symbol(symbol: str) -> str:
        """BTC -> BTCUSDT; symbols already quoted in USD/USDT pass through."""
        s = symbol.replace("/", "").replace(" ", "").upper()
        if "USDT" not in s and "USD" not in s:
            s += "USDT"
        return s

    def resolve_interval(self, timeframe: str) -> str:
        interval = self.ALIASES.get(timeframe, timeframe)
        if interval not in self.INTERVALS:
            log.debug("Unknown interval %r, using 1h", timeframe)
            return "1h"
        return interval

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"

        if not self._session:
            self._session = aiohttp.ClientSession(headers=self.headers)

        timeout = aiohttp.ClientTimeout(total=self.REQUEST_TIMEOUT)

        try:
            async with self._session.request(method, url, timeout=timeout, **kwargs) as resp:
                if resp.status >= 400:
                    try:
                        err_body = await resp.json()
                    except Exception:
                        err_body = await resp.text()

                    log.error("HTTP %s for %s %s: %s", resp.status, method, url, err_body)
                    raise ProviderError(
                        f"Binance request failed: HTTP {resp.status}: {err_body}",
                        status=resp.status,
                    )

                return await resp.json()

        except asyncio.TimeoutError as e:
            log.error("Binance request timed out: %s %s", method, url)
            raise ProviderError("Binance API timeout") from e
        except aiohttp.ClientError as e:
            log.error("Request failed: %s %s - %s", method, url, e)
            raise ProviderError(f"Binance request failed: {e}") from e

    async def get_historical_candles(
        self, symbol: str, timeframe: str, limit: int = 100
    ) -> list[Candle]:
        """
        Fetch the most recent `limit` klines via GET /api/v3/klines.

        Returns candles ordered oldest -> newest.
        """
        if limit <= 0:
            return []

        params = {
            "symbol": self.binance_symbol(symbol),
            "interval": self.resolve_interval(timeframe),
            "limit": min(limit, self.MAX_LIMIT),
        }
        payload = await self._request("GET", "/api/v3/klines", params=params)

        if not isinstance(payload, list):
            raise ProviderError(f"Unexpected klines payload: {payload!r}")

        candles: list[Candle] = []
        for row in payload:
            # [open_time, open, high, low, close, volume, close_time, ...]
            if len(row) < 6:
                continue
            candles.append(
                Candle(
                    timestamp=epoch_to_iso(row[0]),
                    open=float(row[1]),
                    high=float(row[2]),
                    low=float(row[3]),
                    close=float(row[4]),
                    volume=float(row[5]),
                )
            )

        candles.sort(key=lambda x: x.timestamp)
        return candles
