"""Statistical volatility measures over close prices."""

from typing import Optional

import numpy as np

from .base import PriceSeries, as_prices, clamp_period


def calculate_zscore(series: PriceSeries, period: int = 20) -> Optional[float]:
    """
    Distance of the last price from the window mean, in population std units.

    Returns None when fewer than `period` prices are available and 0.0 for a
    flat window.
    """
    prices = as_prices(series)
    period = clamp_period(period)
    if len(prices) < period:
        return None

    window = np.asarray(prices[-period:], dtype=np.float64)
    std = float(window.std(ddof=0))
    if std == 0.0:
        return 0.0
    return float((window[-1] - window.mean()) / std)


def calculate_realized_volatility(
    series: PriceSeries, period: int = 20, periods_per_year: int = 252
) -> Optional[float]:
    """
    Annualised realized volatility from log returns.

    Sample standard deviation (ddof=1) of the last `period` log returns scaled
    by sqrt(periods_per_year). Needs `period + 1` positive prices; returns None
    otherwise.
    """
    prices = as_prices(series)
    period = max(clamp_period(period), 2)
    if len(prices) < period + 1:
        return None

    closes = np.asarray(prices, dtype=np.float64)
    if np.any(closes <= 0):
        return None

    returns = np.diff(np.log(closes))[-period:]
    return float(returns.std(ddof=1) * np.sqrt(periods_per_year))
