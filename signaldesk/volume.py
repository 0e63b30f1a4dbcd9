"""Helpers for volume figures rendered as abbreviated strings ("10.3K", "6.3M")."""

import re

_NUMBER = re.compile(r"\d*\.?\d+(?:E[+-]?\d+)?")
_SUFFIXES = (("B", 1_000_000_000), ("M", 1_000_000), ("K", 1_000))


def parse_volume_string(volume: str | float | int | None) -> float:
    """
    Parse an abbreviated volume string back to a number.

    The first number in the string is scaled by a K/M/B suffix; numbers pass
    through unchanged and anything unparseable is treated as 0.
    """
    if isinstance(volume, bool):
        return 0.0
    if isinstance(volume, (int, float)):
        return float(volume)
    if not volume or not isinstance(volume, str):
        return 0.0

    text = volume.strip().upper().replace(",", "")
    match = _NUMBER.search(text)
    if match is None:
        return 0.0
    value = float(match.group())

    for suffix, scale in _SUFFIXES:
        if suffix in text:
            return value * scale
    return value


def format_volume(volume: float) -> str:
    """Format a volume figure as a short human-readable string."""
    for suffix, scale in _SUFFIXES:
        if volume >= scale:
            return f"{volume / scale:.1f}{suffix}"
    return f"{volume:,.0f}" if float(volume).is_integer() else f"{volume:,}"
