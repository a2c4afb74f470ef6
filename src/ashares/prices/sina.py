"""Sina ``getKLineData`` endpoint: historical bars with moving averages.

``getKLineData?symbol=sh600000&scale=240&ma=5,10&datalen=3``::

    [{"day": "2024-01-02", "open": "6.600", "high": "6.650", "low": "6.580",
      "close": "6.620", "volume": "30123400", "ma_price5": 6.594,
      "ma_volume5": 28456120, "ma_price10": 6.571, "ma_volume10": 27012300}]

Prices and volume arrive as strings; moving averages as JSON numbers. A
window is omitted from a bar (rather than returned as 0) when the endpoint
has too little history for it, and unsupported windows never appear at all.
Unknown symbols yield a ``null`` body.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from ashares.core.exceptions import FieldParseError, MalformedResponseError
from ashares.core.models import MovingAverage, PriceBar
from ashares.ingestion.client import AsharesClient, get_client
from ashares.prices.frequency import is_daily_scale, resolve_sina_scale
from ashares.prices.provider import (
    PreparedRequest,
    json_number,
    parse_datetime,
    parse_number,
    require_positive_count,
)

logger = logging.getLogger(__name__)

_SOURCE = "sina"

_DATE_FORMAT = "%Y-%m-%d"
_DATETIME_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M")


class SinaKlineRow(BaseModel):
    """Schema of one bar object. Extra keys (``ma_*``) are kept."""

    model_config = ConfigDict(frozen=True, extra="allow")

    day: str
    open: str
    high: str
    low: str
    close: str
    volume: str


def _validate_periods(periods: Iterable[int]) -> tuple[int, ...]:
    result = tuple(periods)
    for p in result:
        if isinstance(p, bool) or not isinstance(p, int) or p < 1:
            raise ValueError(f"moving-average periods must be positive integers, got {p!r}")
    return result


class SinaKlineAdapter:
    """Parses ``getKLineData`` responses into bars with optional moving averages.

    Parameters
    ----------
    scale : int
        Minutes per bar as requested. Scales above 239 are daily or coarser
        and produce ``date`` timestamps; finer scales produce ``datetime``.
    periods : Sequence[int]
        Moving-average windows that were requested.
    """

    def __init__(self, scale: int = 240, periods: Sequence[int] = ()) -> None:
        self.scale = scale
        self.periods = _validate_periods(periods)

    @property
    def daily(self) -> bool:
        return is_daily_scale(self.scale)

    def adapt(self, payload: Any, code: str) -> list[PriceBar]:
        if payload is None:
            logger.debug("Sina returned null for %s", code)
            return []
        if not isinstance(payload, list):
            raise MalformedResponseError(
                f"Expected a JSON array of bars for {code}, got {type(payload).__name__}",
                context={"code": code, "key": "$"},
            )
        return [self._parse_item(item, index) for index, item in enumerate(payload)]

    def _parse_item(self, item: Any, index: int) -> PriceBar:
        if not isinstance(item, dict):
            raise FieldParseError(
                f"Bar {index}: expected an object, got {type(item).__name__}",
                context={"field": "row", "value": item, "index": index},
            )
        try:
            row = SinaKlineRow.model_validate(item)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first["loc"]) or "row"
            raise FieldParseError(
                f"Bar {index}: invalid {field}: {first['msg']}",
                context={"field": field, "value": item.get(field), "index": index},
            ) from e

        stamp = parse_datetime(
            row.day,
            (_DATE_FORMAT,) if self.daily else _DATETIME_FORMATS,
            index,
        )
        return PriceBar(
            time=stamp.date() if self.daily else stamp,
            open=parse_number(row.open, "open", index),
            close=parse_number(row.close, "close", index),
            high=parse_number(row.high, "high", index),
            low=parse_number(row.low, "low", index),
            volume=parse_number(row.volume, "volume", index),
            moving_averages=self._moving_averages(item),
            source=_SOURCE,
        )

    def _moving_averages(self, item: dict) -> list[MovingAverage] | None:
        averages: list[MovingAverage] = []
        for period in self.periods:
            value = json_number(item.get(f"ma_price{period}"))
            volume = json_number(item.get(f"ma_volume{period}"))
            if value is None or volume is None:
                continue
            averages.append(MovingAverage(period=period, value=value, volume=volume))
        return averages or None


def prepare_with_moving_averages(
    base_url: str,
    code: str,
    count: int,
    frequency: str,
    periods: Sequence[int] = (),
) -> PreparedRequest:
    """Build the Sina kline request."""
    require_positive_count(count)
    scale = resolve_sina_scale(frequency)
    adapter = SinaKlineAdapter(scale, periods)
    ma = ",".join(str(p) for p in adapter.periods) or "no"
    url = f"{base_url}?symbol={code}&scale={scale}&ma={ma}&datalen={count}"
    return PreparedRequest(code=code, url=url, adapter=adapter)


async def fetch_with_moving_averages(
    code: str,
    count: int,
    frequency: str = "1d",
    periods: Sequence[int] = (),
    *,
    client: AsharesClient | None = None,
) -> list[PriceBar]:
    """Fetch historical bars with the requested moving averages attached.

    Args:
        code: Security code with market prefix, e.g. "sh600000".
        count: Number of bars to request.
        frequency: "1d", "1w", "1M" or "<N>m" (e.g. "30m"). Unparsable values
            fall back to daily.
        periods: Moving-average windows, e.g. (5, 15, 20). The endpoint
            serves 5, 10, 15, 20 and 30; other windows are silently absent.
        client: Transport to use. Defaults to the shared client.

    Returns:
        Bars stamped with ``date`` for daily-or-coarser scales, ``datetime``
        otherwise. A bar's ``moving_averages`` lists only the windows for
        which both average price and average volume were present.
    """
    client = client or get_client()
    request = prepare_with_moving_averages(
        client.config.sources.sina_kline_url, code, count, frequency, periods
    )
    return request.parse(await client.fetch(request.url))
