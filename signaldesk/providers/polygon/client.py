# signaldesk/providers/polygon/client.py
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import aiohttp

from signaldesk.config import settings
from signaldesk.marketdata import Candle, epoch_to_iso
from signaldesk.providers.base import Client, ProviderError

log = logging.getLogger(__name__)


class PolygonClient(Client):
    """Thin wrapper around Polygon.io's aggregates REST API."""

    BASE_URL = "https://api.polygon.io"

    # seconds; the service answers with neutral indicators on timeout
    REQUEST_TIMEOUT = 3.0

    # timeframe -> (multiplier, timespan, lookback window in days)
    TIMEFRAMES: dict[str, tuple[int, str, int]] = {
        "1m": (1, "minute", 2),
        "5m": (5, "minute", 7),
        "15m": (15, "minute", 14),
        "30m": (30, "minute", 30),
        "1h": (1, "hour", 60),
        "4h": (4, "hour", 120),
        "1d": (1, "day", 365),
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

    def __init__(self, asset: str = "stock", api_key: str | None = None) -> None:
        self.asset = asset.lower()
        self.api_key = api_key if api_key is not None else settings.polygon_api_key
        self.headers = {"Accept": "application/json"}
        self._session: aiohttp.ClientSession | None = None

    async def start(self) -> None:
        """Create the HTTP session."""
        if not self.api_key:
            raise ProviderError("POLYGON_API_KEY not configured")
        if self._session is None:
            self._session = aiohttp.ClientSession(headers=self.headers)

    async def close(self) -> None:
        """Close the session."""
        if self._session:
            await self._session.close()
            self._session = None

    # ------------------------------------------------------------------
    # Mapping helpers
    # ------------------------------------------------------------------
    def resolve_timeframe(self, timeframe: str) -> tuple[int, str, int]:
        """
        Map a dashboard timeframe ("5m", "1h", "1d", ...) to Polygon's
        (multiplier, timespan, lookback_days). Unknown values fall back to 1 minute.
        """
        tf = self.ALIASES.get(timeframe) or self.ALIASES.get(timeframe.lower()) or timeframe.lower()
        if tf not in self.TIMEFRAMES:
            log.debug("Unknown timeframe %r, using 1m", timeframe)
            return self.TIMEFRAMES["1m"]
        return self.TIMEFRAMES[tf]

    def provider_symbol(self, symbol: str) -> str:
        """
        Map a UI symbol to Polygon's ticker format.

        crypto: "BTC/USD" or "BTC" -> "X:BTCUSD"; forex: "EUR/USD" -> "C:EURUSD";
        stocks are upper-cased.
        """
        s = symbol.replace(" ", "").upper()
        prefix = {"crypto": "X:", "forex": "C:"}.get(self.asset)
        if prefix is None:
            return s
        if s.startswith(prefix):
            return s

        if "/" in s:
            base, _, quote = s.partition("/")
            return f"{prefix}{base}{quote or 'USD'}"
        if s.endswith("USD") or s.endswith("USDT"):
            return f"{prefix}{s}"
        return f"{prefix}{s}USD"

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------
    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.BASE_URL}{path}"

        if not self._session:
            self._session = aiohttp.ClientSession(headers=self.headers)

        params = dict(kwargs.pop("params", None) or {})
        params["apiKey"] = self.api_key
        timeout = aiohttp.ClientTimeout(total=self.REQUEST_TIMEOUT)

        try:
            async with self._session.request(
                method, url, params=params, timeout=timeout, **kwargs
            ) as resp:
                if resp.status >= 400:
                    try:
                        err_body = await resp.json()
                    except Exception:
                        err_body = await resp.text()

                    log.error("HTTP %s for %s %s: %s", resp.status, method, path, err_body)
                    raise ProviderError(
                        f"Polygon request failed: HTTP {resp.status}: {err_body}",
                        status=resp.status,
                    )

                result: dict[str, Any] = await resp.json()
                return result

        except asyncio.TimeoutError as e:
            log.error("Polygon request timed out after %.0fs: %s %s", self.REQUEST_TIMEOUT, method, path)
            raise ProviderError(f"Polygon API timeout ({self.REQUEST_TIMEOUT:.0f}s)") from e
        except aiohttp.ClientError as e:
            log.error("Request failed: %s %s - %s", method, path, e)
            raise ProviderError(f"Polygon request failed: {e}") from e

    async def get_historical_candles(
        self, symbol: str, timeframe: str, limit: int = 200
    ) -> list[Candle]:
        """
        Fetch the most recent `limit` aggregate bars for (symbol, timeframe).

        Returns candles ordered oldest -> newest.
        """
        if limit <= 0:
            return []

        multiplier, timespan, lookback_days = self.resolve_timeframe(timeframe)
        ticker = self.provider_symbol(symbol)

        to_date = datetime.now(timezone.utc)
        from_date = to_date - timedelta(days=lookback_days)
        path = (
            f"/v2/aggs/ticker/{ticker}/range/{multiplier}/{timespan}/"
            f"{from_date:%Y-%m-%d}/{to_date:%Y-%m-%d}"
        )

        log.debug("Fetching %s %s bars for %s", limit, timeframe, ticker)
        payload = await self._request(
            "GET", path, params={"adjusted": "true", "sort": "asc", "limit": 50000}
        )

        candles: list[Candle] = []
        for bar in payload.get("results") or []:
            ts = bar.get("t")
            close = bar.get("c")
            if ts is None or close is None:
                continue

            c = float(close)
            candles.append(
                Candle(
                    timestamp=epoch_to_iso(ts),
                    open=float(bar.get("o", c)),
                    high=float(bar.get("h", c)),
                    low=float(bar.get("l", c)),
                    close=c,
                    volume=float(bar.get("v") or 0.0),
                )
            )

        candles.sort(key=lambda x: x.timestamp)  # oldest -> newest
        return candles[-limit:]
