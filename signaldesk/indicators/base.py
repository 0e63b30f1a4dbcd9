"""Input coercion shared by the indicator functions."""

from typing import Any, Sequence

from signaldesk.marketdata import Candle

# Anything indicator functions accept as a price series: plain numbers,
# numpy arrays or candles (closes are used).
PriceSeries = Sequence[float] | Sequence[Candle] | Any


def as_prices(series: PriceSeries) -> list[float]:
    """Return the series as a list of floats, taking closes from candles."""
    if series is None:
        return []
    values = list(series)
    if values and isinstance(values[0], Candle):
        return [float(c.close) for c in values]
    return [float(v) for v in values]


def as_candles(candles: Sequence[Candle] | None) -> list[Candle]:
    return list(candles) if candles is not None else []


def clamp_period(period: int) -> int:
    # Indicator functions never raise; a non-positive period behaves as 1.
    return max(int(period), 1)


def last_or_default(values: list[float], default: float = 0.0) -> float:
    return values[-1] if values else default
