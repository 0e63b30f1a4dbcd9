"""Relative Strength Index (RSI) (Wilder)."""

from .base import PriceSeries, as_prices, clamp_period

NEUTRAL_RSI = 50.0


def _compute_rsi(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0.0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def _wilder_averages(prices: list[float], period: int):
    """
    Yield (avg_gain, avg_loss) after each delta from the `period`-th onwards.

    Seed averages are the SMA of the first `period` gains/losses; every later
    delta is folded in with Wilder smoothing.
    """
    deltas = [b - a for a, b in zip(prices, prices[1:])]
    gains = [max(d, 0.0) for d in deltas]
    losses = [max(-d, 0.0) for d in deltas]

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period
    yield avg_gain, avg_loss

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        yield avg_gain, avg_loss


def calculate_rsi(series: PriceSeries, period: int = 14) -> float:
    """
    Latest RSI value using Wilder's smoothing.

    RSI = 100 - (100 / (1 + RS))
    RS  = avg_gain / avg_loss

    Needs `period + 1` prices (period deltas); returns 50.0 otherwise.
    RSI is 100.0 when avg_loss is exactly 0.
    """
    prices = as_prices(series)
    period = clamp_period(period)

    if len(prices) < period + 1:
        return NEUTRAL_RSI

    avg_gain = avg_loss = 0.0
    for avg_gain, avg_loss in _wilder_averages(prices, period):
        pass

    return _compute_rsi(avg_gain, avg_loss)


def calculate_rsi_series(series: PriceSeries, period: int = 14) -> list[float]:
    """
    RSI value for every bar, same length as the input.

    The first `period` bars (no complete seed yet) are neutral 50.0; a series
    too short to seed is neutral throughout.
    """
    prices = as_prices(series)
    period = clamp_period(period)

    if len(prices) < period + 1:
        return [NEUTRAL_RSI] * len(prices)

    rsi = [NEUTRAL_RSI] * period
    for avg_gain, avg_loss in _wilder_averages(prices, period):
        rsi.append(_compute_rsi(avg_gain, avg_loss))

    return rsi
