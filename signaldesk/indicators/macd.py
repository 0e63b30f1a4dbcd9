# signaldesk/indicators/macd.py
"""
MACD (Moving Average Convergence Divergence) implementation.

MACD is a trend-following momentum indicator that shows the relationship
between two moving averages of prices.

Components:
    - MACD Line: Fast EMA - Slow EMA
    - Signal Line: EMA of the MACD Line history
    - Histogram: MACD Line - Signal Line

Signals:
    - MACD crosses above signal: Bullish
    - MACD crosses below signal: Bearish
    - Histogram expanding: Trend strengthening
    - Histogram contracting: Trend weakening
"""

from dataclasses import asdict, dataclass

from .base import PriceSeries, as_prices, clamp_period
from .ema import calculate_ema, calculate_ema_series


@dataclass(frozen=True)
class MACDResult:
    line: float
    signal: float
    hist: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class MACDSeries:
    macd: list[float]
    signal: list[float]
    histogram: list[float]


def _seeded_ema_values(prices: list[float], period: int) -> list[float]:
    """SMA-seeded EMA for every bar from index `period - 1` onwards."""
    if len(prices) < period:
        return []

    k = 2.0 / (period + 1.0)
    ema = sum(prices[:period]) / period
    values = [ema]
    for price in prices[period:]:
        ema = price * k + ema * (1.0 - k)
        values.append(ema)
    return values


def macd_line_history(
    series: PriceSeries, fast: int = 12, slow: int = 26
) -> list[float]:
    """
    MACD line value for every bar where both EMAs are seeded.

    The last element equals ``calculate_ema(fast) - calculate_ema(slow)``.
    """
    prices = as_prices(series)
    fast = clamp_period(fast)
    slow = clamp_period(slow)

    fast_values = _seeded_ema_values(prices, fast)
    slow_values = _seeded_ema_values(prices, slow)
    if not fast_values or not slow_values:
        return []

    # Align both tails on the most recent bar.
    n = min(len(fast_values), len(slow_values))
    return [f - s for f, s in zip(fast_values[-n:], slow_values[-n:])]


def calculate_macd(
    series: PriceSeries, fast: int = 12, slow: int = 26, signal: int = 9
) -> MACDResult:
    """
    Latest MACD line, signal and histogram.

    The signal line is a proper EMA(signal) over the MACD line history. While
    that history is shorter than `signal` bars the signal equals the line
    (histogram 0.0). With fewer than `slow` prices the slow EMA falls back to
    the last price, so a flat or tiny series yields a 0.0 line.
    """
    prices = as_prices(series)
    line = calculate_ema(prices, fast) - calculate_ema(prices, slow)

    history = macd_line_history(prices, fast, slow)
    if not history:
        return MACDResult(line=line, signal=line, hist=0.0)

    signal_value = calculate_ema(history, signal)
    return MACDResult(line=line, signal=signal_value, hist=line - signal_value)


def calculate_macd_series(
    series: PriceSeries, fast: int = 12, slow: int = 26, signal: int = 9
) -> MACDSeries:
    """
    MACD, signal and histogram for every bar (chart overlay variant).

    Uses first-value-seeded EMAs so every output has the input's length.
    """
    prices = as_prices(series)
    fast_ema = calculate_ema_series(prices, fast)
    slow_ema = calculate_ema_series(prices, slow)

    macd = [f - s for f, s in zip(fast_ema, slow_ema)]
    signal_line = calculate_ema_series(macd, signal)
    histogram = [m - s for m, s in zip(macd, signal_line)]

    return MACDSeries(macd=macd, signal=signal_line, histogram=histogram)
