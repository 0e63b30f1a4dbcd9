"""
Market-data provider clients.

The indicator service depends only on the `Client` interface; concrete
providers (Polygon, Binance) implement it over aiohttp.
"""

from .base import Client, ProviderError
from .binance.client import BinanceClient
from .polygon.client import PolygonClient

__all__ = ["Client", "ProviderError", "BinanceClient", "PolygonClient", "create_client"]


def create_client(provider: str, asset: str = "stock") -> Client:
    """Build a client for a provider name ("polygon" or "binance")."""
    name = provider.lower()
    if name == "polygon":
        return PolygonClient(asset=asset)
    if name == "binance":
        return BinanceClient()
    raise ValueError(f"Unknown provider '{provider}'")
