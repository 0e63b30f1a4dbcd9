# signaldesk/rules.py
"""
Deterministic trading rules applied on top of an IndicatorSet.

Thresholds are shared with the LLM prompt so that model commentary and the
rule-based plans speak the same language.
"""

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Literal, Sequence

from signaldesk.indicators import DonchianChannel, IndicatorSet
from signaldesk.marketdata import Candle

THRESHOLDS = {
    # RSI levels
    "RSI_OVERBOUGHT": 70,
    "RSI_OVERSOLD": 30,
    # Stop/target multipliers
    "STOP_ATR_MULTIPLIER": 0.25,
    "TARGET1_ATR_MULTIPLIER": 1,
    "TARGET2_ATR_MULTIPLIER": 2,
    "MIN_RR_RATIO": 1.5,
    # Confidence
    "BASE_CONFIDENCE": 50,
    "PLAN_MIN_CONFIDENCE": 45,
    "PLAN_MAX_CONFIDENCE": 85,
    "MAX_CONFIDENCE": 88,
}

LOOKBACK_PERIODS = {
    "scalp": 100,  # 1m-15m
    "intraday": 150,  # 30m-4h
    "swing": 200,  # 1D-1W
}

# UTC hour ranges [start, end); hours outside both are NY
SESSIONS = {
    "Asia": (22, 8),
    "London": (8, 16),
}

Session = Literal["Asia", "London", "NY"]
TimeframeType = Literal["scalp", "intraday", "swing"]


def round5(n: float) -> float:
    return round(n, 5)


def get_session_utc(when: datetime | None = None) -> Session:
    """
    Trading session for a moment in time.

    Asia wraps midnight (22:00-08:00); London 08:00-16:00 wins the London/NY
    overlap; everything else is NY.
    """
    when = when or datetime.now(timezone.utc)
    hour = when.astimezone(timezone.utc).hour if when.tzinfo else when.hour

    asia_start, asia_end = SESSIONS["Asia"]
    london_start, london_end = SESSIONS["London"]
    if hour >= asia_start or hour < asia_end:
        return "Asia"
    if london_start <= hour < london_end:
        return "London"
    return "NY"


def get_timeframe_type(timeframe: str) -> TimeframeType:
    """Classify a timeframe string as scalp, intraday or swing."""
    tf = timeframe.lower()
    if "m" in tf or tf in ("1", "5", "15"):
        return "scalp"
    if "h" in tf or tf in ("30", "60", "240"):
        return "intraday"
    return "swing"


def lookback_for(timeframe: str) -> int:
    """How many candles to fetch for a timeframe."""
    return LOOKBACK_PERIODS[get_timeframe_type(timeframe)]


@dataclass(frozen=True)
class TradePlan:
    entry: float
    stop: float
    targets: list[float]
    strategy: str
    probability: int


@dataclass(frozen=True)
class TradePlans:
    direction: Literal["LONG", "SHORT"]
    confidence: int
    bullish_checks: int
    scalp: TradePlan
    intraday: TradePlan
    swing: TradePlan

    def to_dict(self) -> dict:
        return asdict(self)


def _r2(x: float) -> float:
    return round(x, 2)


def generate_trade_plans(
    indicators: IndicatorSet,
    donchian: DonchianChannel,
    recent_candles: Sequence[Candle],
) -> TradePlans:
    """
    Build scalp / intraday / swing plans from indicator confluence.

    Six checks vote on direction: price above EMA20, price above EMA50,
    EMA20 above EMA50, RSI above 50, MACD histogram positive and price above
    the Bollinger mid. The majority wins (ties go short). Confidence starts at
    50, is adjusted by how lopsided the vote is and by RSI extremes, and is
    clamped to [45, 85]. Entries are at the current price; stops and targets
    are ATR multiples, with stops pulled in to nearby structure.
    """
    price = indicators.price
    atr = indicators.atr14
    rsi = indicators.rsi14
    hist = indicators.macd.hist

    checks = [
        price > indicators.ema20,
        price > indicators.ema50,
        indicators.ema20 > indicators.ema50,
        rsi > 50,
        hist > 0,
        price > indicators.bollinger.mid,
    ]
    bullish = sum(checks)
    bearish = len(checks) - bullish
    is_long = bullish > bearish
    strength = max(bullish, bearish)

    floor = THRESHOLDS["PLAN_MIN_CONFIDENCE"]
    ceiling = THRESHOLDS["PLAN_MAX_CONFIDENCE"]

    confidence = THRESHOLDS["BASE_CONFIDENCE"]
    if strength >= 5:
        confidence += 20
    elif strength >= 4:
        confidence += 10
    if (rsi > 55 and is_long) or (rsi < 45 and not is_long):
        confidence += 5
    if abs(hist) > 0.00001:
        confidence += 5
    if strength < 4:
        confidence -= 15
    if rsi > 75 or rsi < 25:
        confidence -= 10
    confidence = max(floor, min(ceiling, confidence))

    last20 = list(recent_candles)[-20:]
    lows = sorted(c.low for c in last20) or [price]
    highs = sorted((c.high for c in last20), reverse=True) or [price]
    near_support = lows[min(2, len(lows) - 1)]  # 3rd lowest, skips outliers
    near_resistance = highs[min(2, len(highs) - 1)]
    major_support = lows[int(len(lows) * 0.25)]
    major_resistance = highs[int(len(highs) * 0.25)]

    sign = 1.0 if is_long else -1.0
    direction: Literal["LONG", "SHORT"] = "LONG" if is_long else "SHORT"
    trend = "uptrend" if is_long else "downtrend"

    def stop(distance: float, structure: float) -> float:
        raw = price - sign * atr * distance
        return max(raw, structure) if is_long else min(raw, structure)

    def targets(*multiples: float) -> list[float]:
        return [_r2(price + sign * atr * m) for m in multiples]

    scalp_stop = stop(0.5, near_support if is_long else near_resistance)
    intraday_stop = stop(1.5, major_support if is_long else major_resistance)
    swing_stop = stop(2.5, donchian.low if is_long else donchian.high)

    return TradePlans(
        direction=direction,
        confidence=confidence,
        bullish_checks=bullish,
        scalp=TradePlan(
            entry=_r2(price),
            stop=_r2(scalp_stop),
            targets=targets(1.0, 1.5, 2.0),
            strategy=(
                f"{direction}: entry at market, stop at "
                f"{'micro support' if is_long else 'micro resistance'} ({scalp_stop:.2f}). "
                f"{strength}/6 indicators confirm {trend}."
            ),
            probability=min(confidence + 5, ceiling),
        ),
        intraday=TradePlan(
            entry=_r2(price),
            stop=_r2(intraday_stop),
            targets=targets(2.0, 3.0, 4.0),
            strategy=(
                f"{direction}: EMA20 at {indicators.ema20:.2f}, stop at "
                f"{'major support' if is_long else 'major resistance'} ({intraday_stop:.2f})."
            ),
            probability=confidence,
        ),
        swing=TradePlan(
            entry=_r2(price),
            stop=_r2(swing_stop),
            targets=targets(3.5, 5.0, 7.0),
            strategy=(
                f"{direction}: EMA50 at {indicators.ema50:.2f}, stop at "
                f"{'Donchian low' if is_long else 'Donchian high'} ({swing_stop:.2f}), "
                f"RSI {rsi:.1f}."
            ),
            probability=max(confidence - 5, floor),
        ),
    )
