"""
Support / resistance heuristics.

Two heuristics: the lowest lows / highest highs of a recent
window, or bars that are local extremes against their two neighbours on each
side. They are quick reference levels, not a pivot-point model.
"""

from dataclasses import dataclass
from typing import Sequence

from signaldesk.marketdata import Candle
from .base import as_candles, clamp_period

# Fewer bars than this and the window heuristics return no levels.
MIN_LEVEL_BARS = 10


@dataclass(frozen=True)
class DonchianChannel:
    high: float
    low: float


def _values(series: Sequence[Candle] | Sequence[float], attr: str) -> list[float]:
    values = list(series) if series is not None else []
    if values and isinstance(values[0], Candle):
        return [float(getattr(c, attr)) for c in values]
    return [float(v) for v in values]


def find_support_levels(
    series: Sequence[Candle] | Sequence[float], lookback: int = 50, count: int = 2
) -> list[float]:
    """
    The `count` lowest lows of the last `lookback` bars, lowest first.

    Accepts candles (lows are used) or a plain list of lows.
    """
    lows = _values(series, "low")
    if len(lows) < MIN_LEVEL_BARS:
        return []

    recent = sorted(lows[-clamp_period(lookback):])
    return [v for v in recent[:count] if v]


def find_resistance_levels(
    series: Sequence[Candle] | Sequence[float], lookback: int = 50, count: int = 2
) -> list[float]:
    """
    The `count` highest highs of the last `lookback` bars, highest first.

    Accepts candles (highs are used) or a plain list of highs.
    """
    highs = _values(series, "high")
    if len(highs) < MIN_LEVEL_BARS:
        return []

    recent = sorted(highs[-clamp_period(lookback):], reverse=True)
    return [v for v in recent[:count] if v]


def find_swing_levels(
    candles: Sequence[Candle], count: int = 3
) -> tuple[list[float], list[float]]:
    """
    Local-extreme levels.

    A low strictly below the two lows on each side is support; a high strictly
    above the two highs on each side is resistance.

    Returns:
        (support, resistance): support highest first, resistance lowest first,
        each capped at `count` levels.
    """
    candles = as_candles(candles)
    lows = [c.low for c in candles]
    highs = [c.high for c in candles]

    support: list[float] = []
    resistance: list[float] = []

    for i in range(2, len(candles) - 2):
        neighbours = (i - 2, i - 1, i + 1, i + 2)
        if all(lows[i] < lows[j] for j in neighbours):
            support.append(lows[i])
        if all(highs[i] > highs[j] for j in neighbours):
            resistance.append(highs[i])

    support.sort(reverse=True)
    resistance.sort()
    return support[:count], resistance[:count]


def calculate_donchian(candles: Sequence[Candle], period: int = 20) -> DonchianChannel:
    """Highest high and lowest low of the last `period` candles."""
    window = as_candles(candles)[-clamp_period(period):]
    if not window:
        return DonchianChannel(high=0.0, low=0.0)
    return DonchianChannel(
        high=max(c.high for c in window),
        low=min(c.low for c in window),
    )
