"""Simple Moving Average (SMA) implementation."""

from .base import PriceSeries, as_prices, clamp_period


def calculate_sma(series: PriceSeries, period: int) -> float:
    """Mean of the last `period` prices (all of them if fewer; 0.0 when empty)."""
    window = as_prices(series)[-clamp_period(period):]
    if not window:
        return 0.0
    return sum(window) / len(window)
