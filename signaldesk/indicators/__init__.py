# signaldesk/indicators/__init__.py
"""
Technical indicators for the dashboard.

Pure functions over price series or candle sequences. They never raise on
short or empty input; they fall back to neutral values instead (RSI 50,
EMA = last price, ATR 0, no levels).

Example:
    from signaldesk.indicators import calculate_rsi, calculate_macd

    closes = [c.close for c in candles]
    rsi = calculate_rsi(closes, 14)
    macd = calculate_macd(closes)
    if macd.hist > 0 and rsi < 70:
        ...
"""

from .atr import calculate_atr, true_ranges
from .bollinger_bands import BollingerBands, calculate_bollinger_bands
from .ema import calculate_ema, calculate_ema_series
from .levels import (
    DonchianChannel,
    calculate_donchian,
    find_resistance_levels,
    find_support_levels,
    find_swing_levels,
)
from .macd import MACDResult, MACDSeries, calculate_macd, calculate_macd_series
from .rsi import calculate_rsi, calculate_rsi_series
from .sma import calculate_sma
from .snapshot import (
    IndicatorSeries,
    IndicatorSet,
    calculate_indicator_series,
    calculate_indicators,
)
from .volatility import calculate_realized_volatility, calculate_zscore
from .vwap import calculate_vwap

__all__ = [
    "BollingerBands",
    "DonchianChannel",
    "IndicatorSeries",
    "IndicatorSet",
    "MACDResult",
    "MACDSeries",
    "calculate_atr",
    "calculate_bollinger_bands",
    "calculate_donchian",
    "calculate_ema",
    "calculate_ema_series",
    "calculate_indicator_series",
    "calculate_indicators",
    "calculate_macd",
    "calculate_macd_series",
    "calculate_realized_volatility",
    "calculate_rsi",
    "calculate_rsi_series",
    "calculate_sma",
    "calculate_vwap",
    "calculate_zscore",
    "find_resistance_levels",
    "find_support_levels",
    "find_swing_levels",
    "true_ranges",
]
