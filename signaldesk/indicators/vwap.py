"""Volume Weighted Average Price (VWAP) implementation."""

from typing import Optional, Sequence

from signaldesk.marketdata import Candle
from .base import as_candles


def calculate_vwap(candles: Sequence[Candle], window: Optional[int] = None) -> float:
    """
    VWAP = sum(typical_price * volume) / sum(volume)

    Price basis is the typical price (H+L+C)/3. Computed over the last
    `window` candles, or all of them when `window` is None. Candles with no
    reported volume count with a weight of 1 so that sparse feeds (forex,
    indices) still produce a plain average. Empty input yields 0.0.
    """
    candles = as_candles(candles)
    if window is not None and window > 0:
        candles = candles[-window:]

    cum_pv = 0.0
    cum_v = 0.0
    for candle in candles:
        vol = float(candle.volume) if candle.volume and candle.volume > 0 else 1.0
        cum_pv += candle.typical_price * vol
        cum_v += vol

    if cum_v == 0.0:
        return 0.0

    return cum_pv / cum_v
