"""Exponential Moving Average (EMA) implementation."""

from .base import PriceSeries, as_prices, clamp_period, last_or_default


def calculate_ema(series: PriceSeries, period: int) -> float:
    """
    Latest EMA value of a price series.

    - Seed with the SMA of the first `period` values
    - Thereafter: ema = price * k + ema * (1 - k), k = 2 / (period + 1)

    With fewer than `period` values the last available price is returned
    (0.0 for an empty series), so a single-element series returns that element.
    """
    prices = as_prices(series)
    period = clamp_period(period)

    if len(prices) < period:
        return last_or_default(prices)

    k = 2.0 / (period + 1.0)
    ema = sum(prices[:period]) / period
    for price in prices[period:]:
        ema = price * k + ema * (1.0 - k)

    return ema


def calculate_ema_series(series: PriceSeries, period: int) -> list[float]:
    """
    EMA value for every bar, same length as the input.

    Seeded with the first price rather than an SMA so that chart overlays have
    a value from the very first bar.
    """
    prices = as_prices(series)
    if not prices:
        return []

    k = 2.0 / (clamp_period(period) + 1.0)
    ema = [prices[0]]
    for price in prices[1:]:
        ema.append((price - ema[-1]) * k + ema[-1])

    return ema
