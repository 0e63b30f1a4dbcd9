"""
Indicator snapshots: every indicator the dashboard shows, computed in one pass.

Example:
    from signaldesk.indicators import calculate_indicators

    snapshot = calculate_indicators(candles)
    if snapshot.rsi14 > 70:
        print("Overbought")
"""

from dataclasses import dataclass, field
from typing import Any, Sequence

from signaldesk.marketdata import Candle
from .atr import calculate_atr
from .base import as_candles, as_prices, last_or_default
from .bollinger_bands import BollingerBands, calculate_bollinger_bands
from .ema import calculate_ema, calculate_ema_series
from .levels import find_resistance_levels, find_support_levels
from .macd import MACDResult, calculate_macd, calculate_macd_series
from .rsi import NEUTRAL_RSI, calculate_rsi, calculate_rsi_series
from .vwap import calculate_vwap


@dataclass(frozen=True)
class IndicatorSet:
    """
    Scalar indicator values derived from a candle sequence.

    Recomputed on every call; never treated as authoritative state.
    """

    price: float = 0.0
    ema20: float = 0.0
    ema50: float = 0.0
    ema200: float = 0.0
    rsi14: float = NEUTRAL_RSI
    macd: MACDResult = field(default_factory=lambda: MACDResult(0.0, 0.0, 0.0))
    atr14: float = 0.0
    bollinger: BollingerBands = field(
        default_factory=lambda: BollingerBands(0.0, 0.0, 0.0)
    )
    vwap: float = 0.0
    support: list[float] = field(default_factory=list)
    resistance: list[float] = field(default_factory=list)
    candle_count: int = 0

    @classmethod
    def neutral(cls) -> "IndicatorSet":
        """Defaults used when there is no data to compute from."""
        return cls()

    def to_dict(self) -> dict[str, Any]:
        """JSON-serialisable representation."""
        return {
            "price": self.price,
            "ema20": self.ema20,
            "ema50": self.ema50,
            "ema200": self.ema200,
            "rsi14": self.rsi14,
            "macd": self.macd.to_dict(),
            "atr14": self.atr14,
            "bollinger": self.bollinger.to_dict(),
            "vwap": self.vwap,
            "support": list(self.support),
            "resistance": list(self.resistance),
            "candle_count": self.candle_count,
        }


@dataclass(frozen=True)
class IndicatorSeries:
    """Per-bar indicator series for chart overlays."""

    rsi: list[float]
    ema12: list[float]
    ema26: list[float]
    macd: list[float]
    macd_signal: list[float]
    macd_histogram: list[float]


def calculate_indicators(candles: Sequence[Candle]) -> IndicatorSet:
    """Compute the full IndicatorSet for a candle sequence (oldest first)."""
    candles = as_candles(candles)
    if not candles:
        return IndicatorSet.neutral()

    closes = as_prices(candles)

    return IndicatorSet(
        price=last_or_default(closes),
        ema20=calculate_ema(closes, 20),
        ema50=calculate_ema(closes, 50),
        ema200=calculate_ema(closes, 200),
        rsi14=calculate_rsi(closes, 14),
        macd=calculate_macd(closes),
        atr14=calculate_atr(candles, 14),
        bollinger=calculate_bollinger_bands(closes, 20, 2.0),
        vwap=calculate_vwap(candles),
        support=find_support_levels(candles),
        resistance=find_resistance_levels(candles),
        candle_count=len(candles),
    )


def calculate_indicator_series(series: Sequence[Candle] | Sequence[float]) -> IndicatorSeries:
    """Compute RSI, EMA12/26 and MACD series for every bar."""
    prices = as_prices(series)
    macd = calculate_macd_series(prices)

    return IndicatorSeries(
        rsi=calculate_rsi_series(prices),
        ema12=calculate_ema_series(prices, 12),
        ema26=calculate_ema_series(prices, 26),
        macd=macd.macd,
        macd_signal=macd.signal,
        macd_histogram=macd.histogram,
    )
