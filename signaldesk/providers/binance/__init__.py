from .client import BinanceClient

__all__ = ["BinanceClient"]
