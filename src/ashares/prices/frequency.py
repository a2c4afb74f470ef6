"""Frequency and end-date resolution for the quote endpoints.

Each endpoint names granularity differently:

- Tencent ``fqkline`` wants a keyword: day / week / month.
- Tencent ``mkline`` wants a minute multiplier (``m1``, ``m5``, ...).
- Sina ``getKLineData`` wants a minute scale, where a trading day is 240.

Unknown or unparsable inputs fall back to a default instead of raising.
"""

from __future__ import annotations

from datetime import date, datetime

from ashares.core.models import KlineUnit

_KLINE_UNITS: dict[str, KlineUnit] = {
    "1w": KlineUnit.WEEK,
    "1M": KlineUnit.MONTH,
}

_SINA_SCALES: dict[str, int] = {
    "1d": 240,
    "1w": 1200,
    "1M": 7200,
}

DEFAULT_MINUTE_SCALE = 1
DEFAULT_SINA_SCALE = 240

# Sina scales at or above one trading day (240 minutes) carry date-only stamps.
DAILY_SCALE_THRESHOLD = 239


def resolve_kline_unit(frequency: str) -> KlineUnit:
    """Map "1w" / "1M" to week / month; everything else is day."""
    return _KLINE_UNITS.get(frequency, KlineUnit.DAY)


def _leading_number(frequency: str) -> int | None:
    """Parse "<N><unit>" or "<N>" into N, or None if there is no positive N."""
    text = frequency.strip()
    if text and not text[-1].isdigit():
        text = text[:-1]
    # isdigit() alone accepts "²" and other digits int() rejects
    if not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    return value if value > 0 else None


def resolve_minute_scale(frequency: str) -> int:
    """Minute multiplier for the Tencent minute endpoint ("5m" -> 5, default 1)."""
    value = _leading_number(frequency)
    return DEFAULT_MINUTE_SCALE if value is None else value


def resolve_sina_scale(frequency: str) -> int:
    """Minute scale for the Sina endpoint.

    "1d" / "1w" / "1M" map to 240 / 1200 / 7200. Any other value is read as
    "<N>m"; anything unparsable falls back to 240 (daily).
    """
    if frequency in _SINA_SCALES:
        return _SINA_SCALES[frequency]
    value = _leading_number(frequency)
    return DEFAULT_SINA_SCALE if value is None else value


def is_daily_scale(scale: int) -> bool:
    return scale > DAILY_SCALE_THRESHOLD


def normalize_end_date(end_date: str | date | None, today: date | None = None) -> str:
    """Return the end-date query value; "" means "most recent".

    An end date equal to today's local date is sent as "" as well, so the
    endpoint returns the live trading day.
    """
    if end_date is None:
        return ""
    if isinstance(end_date, datetime):
        end_date = end_date.date()
    if isinstance(end_date, date):
        end_date = end_date.isoformat()
    today = today or date.today()
    if end_date == today.isoformat():
        return ""
    return end_date
