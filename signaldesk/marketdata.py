# signaldesk/marketdata.py
"""
Candle data structures and conversion helpers.

Provides the OHLCV candle record consumed by the indicator library, a rolling
window for keeping recent history per symbol/timeframe, and helpers for turning
loosely-typed provider/chart bars into candles.
"""

import math
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import numpy as np

from signaldesk.volume import parse_volume_string


@dataclass(frozen=True)
class Candle:
    """
    Represents a single OHLCV candle.

    Attributes:
        timestamp: ISO 8601 UTC timestamp (e.g. "2025-01-01T00:00:00Z")
        open: Opening price
        high: Highest price during period
        low: Lowest price during period
        close: Closing price
        volume: Traded volume (or 0 if unavailable)
    """

    timestamp: str
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def typical_price(self) -> float:
        """Typical price (HLC/3), the VWAP price basis."""
        return (self.high + self.low + self.close) / 3

    @property
    def mid(self) -> float:
        """Calculate midpoint between high and low."""
        return (self.high + self.low) / 2

    @property
    def range(self) -> float:
        """Calculate candle range (high - low)."""
        return self.high - self.low

    def __repr__(self) -> str:
        return (
            f"Candle(timestamp={self.timestamp}, "
            f"O={self.open:.5f}, H={self.high:.5f}, "
            f"L={self.low:.5f}, C={self.close:.5f}, "
            f"V={self.volume:.0f})"
        )


def to_seconds(ms_or_sec: float) -> int:
    """Normalise an epoch timestamp that may be in milliseconds to seconds."""
    value = float(ms_or_sec)
    if value > 2_000_000_000:
        return int(value // 1000)
    return int(value)


ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def epoch_to_iso(ms_or_sec: float) -> str:
    """Convert an epoch timestamp (seconds or milliseconds) to ISO 8601 UTC."""
    dt = datetime.fromtimestamp(to_seconds(ms_or_sec), tz=timezone.utc)
    return dt.strftime(ISO_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp into an aware UTC datetime.

    Accepts a trailing "Z", explicit offsets and fractional seconds; naive
    values are taken as UTC.

    Raises:
        ValueError: If `value` is not ISO 8601
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def iso_to_utc(value: str) -> str:
    """Normalise an ISO 8601 timestamp to the "YYYY-MM-DDTHH:MM:SSZ" form."""
    return parse_timestamp(value).strftime(ISO_FORMAT)


def _first(bar: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = bar.get(key)
        if value is not None:
            return value
    return None


def candles_from_bars(bars: Iterable[dict[str, Any]], max_bars: int = 500) -> list[Candle]:
    """
    Build candles from chart/provider bars.

    Accepts short keys (t/o/h/l/c/v) or long keys (time/open/high/low/close/volume).
    Only the last `max_bars` bars are kept. Bars without a time or with a
    non-numeric close are dropped; missing open/high/low fall back to the close.
    Times may be epoch seconds/milliseconds or ISO 8601 strings (any offset);
    all are normalised to "YYYY-MM-DDTHH:MM:SSZ" and unparseable times drop
    the bar.

    Returns:
        List of Candle objects, oldest first
    """
    bars = list(bars)[-max_bars:] if max_bars > 0 else []
    candles: list[Candle] = []

    for bar in bars:
        raw_time = _first(bar, "t", "time", "timestamp")
        if not raw_time:
            continue

        try:
            close = float(_first(bar, "c", "close"))
        except (TypeError, ValueError):
            continue
        if math.isnan(close):
            continue

        def price(*keys: str) -> float:
            value = _first(bar, *keys)
            try:
                return float(value) if value is not None else close
            except (TypeError, ValueError):
                return close

        try:
            if isinstance(raw_time, str) and not raw_time.replace(".", "", 1).isdigit():
                timestamp = iso_to_utc(raw_time)
            else:
                timestamp = epoch_to_iso(float(raw_time))
        except (TypeError, ValueError, OverflowError, OSError):
            continue

        candles.append(
            Candle(
                timestamp=timestamp,
                open=price("o", "open"),
                high=price("h", "high"),
                low=price("l", "low"),
                close=close,
                volume=parse_volume_string(_first(bar, "v", "volume") or 0),
            )
        )

    return candles


class ChartHistory:
    """
    Maintains a rolling window of candles for a specific symbol/timeframe pair.

    Provides convenient access to price arrays needed for indicator calculations.
    Automatically manages memory by limiting history length.

    Example:
        history = ChartHistory("AAPL", "1h", max_length=200)
        history.extend(candles)

        closes = history.get_closes()
        highs = history.get_highs(count=20)  # Last 20 candles only
    """

    def __init__(self, symbol: str, timeframe: str, max_length: int = 500):
        self.symbol = symbol
        self.timeframe = timeframe
        self.max_length = max_length
        self.candles: deque[Candle] = deque(maxlen=max_length)

    def add_candle(self, candle: Candle) -> None:
        """
        Add a new candle to history.

        A candle at the same instant as the latest one replaces it (the
        still-forming bar) and older candles are ignored, so overlapping
        fetches can be merged safely. Otherwise it is appended and the oldest
        dropped once at max_length. Timestamps are compared as instants, not
        strings, so offset and fractional-second forms order correctly.
        """
        if self.candles:
            latest = parse_timestamp(self.candles[-1].timestamp)
            current = parse_timestamp(candle.timestamp)
            if current == latest:
                self.candles[-1] = candle
                return
            if current < latest:
                return
        self.candles.append(candle)

    def extend(self, candles: Iterable[Candle]) -> None:
        for candle in candles:
            self.add_candle(candle)

    def get_candles(self, count: Optional[int] = None) -> list[Candle]:
        """
        Get candle objects.

        Args:
            count: Number of most recent candles to return (None = all)

        Returns:
            List of Candle objects, oldest first
        """
        if count is None:
            return list(self.candles)
        return list(self.candles)[-count:]

    def get_highs(self, count: Optional[int] = None) -> np.ndarray:
        """Get array of high prices."""
        candles = self.get_candles(count)
        return np.array([c.high for c in candles], dtype=np.float64)

    def get_lows(self, count: Optional[int] = None) -> np.ndarray:
        """Get array of low prices."""
        candles = self.get_candles(count)
        return np.array([c.low for c in candles], dtype=np.float64)

    def get_closes(self, count: Optional[int] = None) -> np.ndarray:
        """Get array of closing prices."""
        candles = self.get_candles(count)
        return np.array([c.close for c in candles], dtype=np.float64)

    def get_volumes(self, count: Optional[int] = None) -> np.ndarray:
        """Get array of volumes."""
        candles = self.get_candles(count)
        return np.array([c.volume for c in candles], dtype=np.float64)

    def get_typical_prices(self, count: Optional[int] = None) -> np.ndarray:
        """Get array of typical prices (HLC/3)."""
        candles = self.get_candles(count)
        return np.array([c.typical_price for c in candles], dtype=np.float64)

    @property
    def latest(self) -> Optional[Candle]:
        """Get the most recent candle, or None if empty."""
        return self.candles[-1] if self.candles else None

    def __len__(self) -> int:
        return len(self.candles)

    def __repr__(self) -> str:
        return (
            f"ChartHistory(symbol={self.symbol}, timeframe={self.timeframe}, "
            f"candles={len(self)}/{self.max_length})"
        )
