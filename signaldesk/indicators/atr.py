"""Average True Range (ATR) implementation."""

from typing import Sequence

from signaldesk.marketdata import Candle
from .base import as_candles, clamp_period


def true_ranges(candles: Sequence[Candle]) -> list[float]:
    """
    True Range for every candle after the first.

    TR = max(
      high - low,
      abs(high - prev_close),
      abs(low - prev_close),
    )
    """
    candles = as_candles(candles)
    return [
        max(
            cur.high - cur.low,
            abs(cur.high - prev.close),
            abs(cur.low - prev.close),
        )
        for prev, cur in zip(candles, candles[1:])
    ]


def calculate_atr(candles: Sequence[Candle], period: int = 14) -> float:
    """
    Simple average of the last `period` true ranges.

    This is a plain mean, not Wilder's smoothing. Fewer than two candles
    (no true range available) yields 0.0.
    """
    trs = true_ranges(candles)
    if not trs:
        return 0.0

    recent = trs[-clamp_period(period):]
    return sum(recent) / len(recent)
