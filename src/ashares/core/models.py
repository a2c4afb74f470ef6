"""Pydantic data models — the normalized price-bar contracts."""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

# --- Constants ---

# Moving-average windows served by the Sina kline endpoint. Other periods are
# accepted in requests but never come back populated.
SUPPORTED_MA_PERIODS: tuple[int, ...] = (5, 10, 15, 20, 30)

# --- Enumerations ---


class TimeKind(StrEnum):
    """Which variant a bar's timestamp uses."""

    DATE = "date"
    DATETIME = "datetime"


class KlineUnit(StrEnum):
    """Granularity keywords understood by the Tencent kline endpoint."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


# --- Bar Models ---


class MovingAverage(BaseModel):
    """One moving-average window for a single bar."""

    model_config = ConfigDict(frozen=True)

    period: int
    value: float
    volume: float

    @field_validator("period")
    @classmethod
    def period_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"period must be >= 1, got {v}")
        return v


class PriceBar(BaseModel):
    """A single OHLCV bar with optional moving averages.

    ``time`` is a ``date`` for day/week/month bars and a ``datetime`` for
    intraday bars; a single result list never mixes the two. Prices are in
    the source currency and are not range-checked here.

    ``moving_averages`` is None, never an empty list, when no window resolved.
    """

    model_config = ConfigDict(frozen=True)

    # datetime first: a datetime is also a date and must keep its clock time.
    time: datetime | date
    open: float
    close: float
    high: float
    low: float
    volume: float
    moving_averages: list[MovingAverage] | None = None
    source: str = "unknown"

    @field_validator("moving_averages")
    @classmethod
    def empty_averages_become_none(
        cls, v: list[MovingAverage] | None
    ) -> list[MovingAverage] | None:
        return v or None

    @property
    def time_kind(self) -> TimeKind:
        """Tag distinguishing date-only bars from intraday bars."""
        if isinstance(self.time, datetime):
            return TimeKind.DATETIME
        return TimeKind.DATE

    def moving_average(self, period: int) -> MovingAverage | None:
        """Return the moving average for ``period``, if the bar carries one."""
        for ma in self.moving_averages or ():
            if ma.period == period:
                return ma
        return None
