"""Tencent (gtimg) kline endpoints: day/week/month and minute bars.

Response shapes
---------------
``fqkline/get?param=sh600000,day,,2024-01-31,10,qfq``::

    {"code": 0, "data": {"sh600000": {"qfqday": [["2024-01-02", "6.60",
     "6.62", "6.65", "6.58", "301234.00"], ...], "qt": {...}}}}

The bar array is labelled ``qfq<unit>`` (forward-adjusted) for most
securities, but indices and some markets only return plain ``<unit>``.

``kline/mkline?param=sh600000,m5,,10``::

    {"code": 0, "data": {"sh600000": {"m5": [["202401021035", "6.60",
     "6.61", "6.62", "6.59", "1234.00", ...], ...],
     "qt": {"sh600000": ["1", "浦发银行", "600000", "6.63", ...]}}}}

Element 3 of the ``qt`` quote is the live price, which is fresher than the
close of the last (still forming) minute bar.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from ashares.core.exceptions import FieldParseError, MalformedResponseError
from ashares.core.models import KlineUnit, PriceBar
from ashares.ingestion.client import AsharesClient, get_client
from ashares.prices.frequency import (
    normalize_end_date,
    resolve_kline_unit,
    resolve_minute_scale,
)
from ashares.prices.provider import (
    PreparedRequest,
    decimal_from_string,
    parse_date,
    parse_datetime,
    parse_number,
    require_positive_count,
)

logger = logging.getLogger(__name__)

_SOURCE = "tencent"

# Positions within a bar row, after the timestamp at index 0.
_ROW_FIELDS: tuple[str, ...] = ("open", "close", "high", "low", "volume")

_DATE_FORMAT = "%Y-%m-%d"
_MINUTE_FORMAT = "%Y%m%d%H%M"

# Index of the live price within data[code]["qt"][code].
_LIVE_PRICE_INDEX = 3


def _security_node(payload: Any, code: str) -> dict:
    """Return ``payload["data"][code]``."""
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        raise MalformedResponseError(
            "Response has no 'data' object",
            context={"code": code, "key": "data"},
        )
    node = data.get(code)
    if not isinstance(node, dict):
        raise MalformedResponseError(
            f"Response has no data for {code}",
            context={"code": code, "key": f"data.{code}"},
        )
    return node


def _first_array(node: dict, keys: tuple[str, ...], code: str) -> list:
    """Return the array under the first key of ``keys`` present in ``node``."""
    for key in keys:
        if key not in node:
            continue
        rows = node[key]
        if not isinstance(rows, list):
            raise MalformedResponseError(
                f"'{key}' for {code} is not an array",
                context={"code": code, "key": key},
            )
        return rows
    raise MalformedResponseError(
        f"No bar array for {code} under any of {list(keys)}",
        context={"code": code, "key": "|".join(keys)},
    )


def _parse_row(row: Any, index: int, time_value: date) -> PriceBar:
    values = {
        field: parse_number(row[pos], field, index)
        for pos, field in enumerate(_ROW_FIELDS, start=1)
    }
    return PriceBar(time=time_value, source=_SOURCE, **values)


def _check_row(row: Any, index: int) -> None:
    if not isinstance(row, list) or len(row) < len(_ROW_FIELDS) + 1:
        raise FieldParseError(
            f"Bar {index}: expected [time, open, close, high, low, volume, ...]",
            context={"field": "row", "value": row, "index": index},
        )


class TencentKlineAdapter:
    """Parses ``fqkline`` day/week/month responses into date-stamped bars."""

    def __init__(self, unit: KlineUnit = KlineUnit.DAY) -> None:
        self.unit = KlineUnit(unit)

    @property
    def array_keys(self) -> tuple[str, ...]:
        """Keys that may hold the bar array, most preferred first."""
        return (f"qfq{self.unit}", str(self.unit))

    def adapt(self, payload: Any, code: str) -> list[PriceBar]:
        rows = _first_array(_security_node(payload, code), self.array_keys, code)
        bars: list[PriceBar] = []
        for index, row in enumerate(rows):
            _check_row(row, index)
            bars.append(_parse_row(row, index, parse_date(row[0], _DATE_FORMAT, index)))
        return bars


class TencentMinuteAdapter:
    """Parses ``mkline`` responses and refreshes the last bar from the live quote."""

    def __init__(self, scale: int = 1) -> None:
        if scale < 1:
            raise ValueError(f"scale must be >= 1, got {scale}")
        self.scale = scale

    @property
    def array_key(self) -> str:
        return f"m{self.scale}"

    def adapt(self, payload: Any, code: str) -> list[PriceBar]:
        node = _security_node(payload, code)
        rows = _first_array(node, (self.array_key,), code)

        bars: list[PriceBar] = []
        for index, row in enumerate(rows):
            _check_row(row, index)
            stamp = parse_datetime(row[0], (_MINUTE_FORMAT,), index)
            bars.append(_parse_row(row, index, stamp))

        live = live_price(node, code)
        if live is not None and bars:
            bars[-1] = bars[-1].model_copy(update={"close": live})
        return bars


def live_price(node: dict, code: str) -> float | None:
    """Read ``qt[code][3]`` from a security node; None if absent or unparsable."""
    qt = node.get("qt")
    quote = qt.get(code) if isinstance(qt, dict) else None
    if not isinstance(quote, list) or len(quote) <= _LIVE_PRICE_INDEX:
        logger.debug("No live quote for %s", code)
        return None

    raw = quote[_LIVE_PRICE_INDEX]
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        try:
            return decimal_from_string(raw)
        except ValueError:
            pass
    logger.debug("Ignoring unparsable live price %r for %s", raw, code)
    return None


# --- Request construction ---


def prepare_day_week_month(
    base_url: str,
    code: str,
    end_date: str | date | None,
    count: int,
    frequency: str,
    today: date | None = None,
) -> PreparedRequest:
    """Build the forward-adjusted kline request for day/week/month bars."""
    require_positive_count(count)
    unit = resolve_kline_unit(frequency)
    end = normalize_end_date(end_date, today)
    url = f"{base_url}?param={code},{unit},,{end},{count},qfq"
    return PreparedRequest(code=code, url=url, adapter=TencentKlineAdapter(unit))


def prepare_minute(base_url: str, code: str, count: int, frequency: str) -> PreparedRequest:
    """Build the minute-bar request."""
    require_positive_count(count)
    scale = resolve_minute_scale(frequency)
    url = f"{base_url}?param={code},m{scale},,{count}"
    return PreparedRequest(code=code, url=url, adapter=TencentMinuteAdapter(scale))


# --- Public async operations ---


async def fetch_day_week_month(
    code: str,
    end_date: str | date | None,
    count: int,
    frequency: str = "1d",
    *,
    client: AsharesClient | None = None,
) -> list[PriceBar]:
    """Fetch forward-adjusted day, week or month bars, oldest first.

    Args:
        code: Security code with market prefix, e.g. "sh600000".
        end_date: Last bar date ("YYYY-MM-DD"). None, or today's date,
            means the most recent bar.
        count: Number of bars to request.
        frequency: "1d", "1w" or "1M". Anything else is treated as "1d".
        client: Transport to use. Defaults to the shared client.

    Returns:
        Bars with ``date`` timestamps and no moving averages.

    Raises:
        UninitializedClientError: No client given and init_ashares() not called.
        TransportError: The HTTP exchange failed.
        MalformedResponseError: The body is not JSON or lacks the bar array.
        FieldParseError: A bar field cannot be parsed.
    """
    client = client or get_client()
    request = prepare_day_week_month(
        client.config.sources.tencent_kline_url, code, end_date, count, frequency
    )
    return request.parse(await client.fetch(request.url))


async def fetch_minute(
    code: str,
    count: int,
    frequency: str = "1m",
    *,
    client: AsharesClient | None = None,
) -> list[PriceBar]:
    """Fetch the most recent minute bars, with the last close set to the live price.

    Args:
        code: Security code with market prefix, e.g. "sh600000".
        count: Number of bars to request.
        frequency: "<N>m", e.g. "1m", "5m", "30m". Defaults to 1 minute if
            no multiplier can be read.
        client: Transport to use. Defaults to the shared client.

    Returns:
        Bars with ``datetime`` timestamps.
    """
    client = client or get_client()
    request = prepare_minute(client.config.sources.tencent_minute_url, code, count, frequency)
    return request.parse(await client.fetch(request.url))
