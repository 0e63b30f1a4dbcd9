"""Bollinger Bands implementation."""

import math
from dataclasses import asdict, dataclass

from .base import PriceSeries, as_prices, clamp_period


@dataclass(frozen=True)
class BollingerBands:
    upper: float
    mid: float
    lower: float

    @property
    def width(self) -> float:
        return self.upper - self.lower

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def calculate_bollinger_bands(
    series: PriceSeries, period: int = 20, mult: float = 2.0
) -> BollingerBands:
    """
    Bollinger Bands (SMA +/- mult * population standard deviation).

    Uses population standard deviation (ddof=0), which matches the common
    "platform default" behavior.

    With fewer than `period` prices the bands collapse onto the mean of what
    is available (all 0.0 for an empty series).
    """
    prices = as_prices(series)
    period = clamp_period(period)

    if not prices:
        return BollingerBands(upper=0.0, mid=0.0, lower=0.0)

    if len(prices) < period:
        mean = sum(prices) / len(prices)
        return BollingerBands(upper=mean, mid=mean, lower=mean)

    mult = abs(float(mult))
    window = prices[-period:]
    mean = sum(window) / period
    var = sum((x - mean) ** 2 for x in window) / period  # ddof=0
    std = math.sqrt(var)

    return BollingerBands(
        upper=mean + mult * std,
        mid=mean,
        lower=mean - mult * std,
    )
