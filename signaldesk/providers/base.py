"""
Provider-neutral interfaces.

Keeps the indicator service independent from any single market-data vendor.
"""

import abc
from typing import Any

from signaldesk.marketdata import Candle


class ProviderError(RuntimeError):
    """An upstream market-data request failed (HTTP error, timeout, bad payload)."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class Client(abc.ABC):
    """Abstract base for market-data provider clients."""

    async def __aenter__(self) -> "Client":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @abc.abstractmethod
    async def start(self) -> None:
        """Initialise the client (e.g. create the HTTP session)."""
        raise NotImplementedError

    @abc.abstractmethod
    async def close(self) -> None:
        """Close any underlying resources."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_historical_candles(
        self, symbol: str, timeframe: str, limit: int
    ) -> list[Candle]:
        """Return up to `limit` most recent candles, oldest first."""
        raise NotImplementedError
