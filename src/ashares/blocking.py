"""Blocking counterparts of the ``ashares.prices`` operations.

Same request builders and adapters; the only difference is that the fetch
runs on ``BlockingAsharesClient`` (registered with ``init_ashares_blocking()``)
and the calling thread waits for it.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from ashares.core.models import PriceBar
from ashares.ingestion.client import BlockingAsharesClient, get_blocking_client
from ashares.prices.sina import prepare_with_moving_averages
from ashares.prices.tencent import prepare_day_week_month, prepare_minute


def fetch_day_week_month(
    code: str,
    end_date: str | date | None,
    count: int,
    frequency: str = "1d",
    *,
    client: BlockingAsharesClient | None = None,
) -> list[PriceBar]:
    """Blocking ``ashares.prices.fetch_day_week_month``."""
    client = client or get_blocking_client()
    request = prepare_day_week_month(
        client.config.sources.tencent_kline_url, code, end_date, count, frequency
    )
    return request.parse(client.fetch(request.url))


def fetch_minute(
    code: str,
    count: int,
    frequency: str = "1m",
    *,
    client: BlockingAsharesClient | None = None,
) -> list[PriceBar]:
    """Blocking ``ashares.prices.fetch_minute``."""
    client = client or get_blocking_client()
    request = prepare_minute(client.config.sources.tencent_minute_url, code, count, frequency)
    return request.parse(client.fetch(request.url))


def fetch_with_moving_averages(
    code: str,
    count: int,
    frequency: str = "1d",
    periods: Sequence[int] = (),
    *,
    client: BlockingAsharesClient | None = None,
) -> list[PriceBar]:
    """Blocking ``ashares.prices.fetch_with_moving_averages``."""
    client = client or get_blocking_client()
    request = prepare_with_moving_averages(
        client.config.sources.sina_kline_url, code, count, frequency, periods
    )
    return request.parse(client.fetch(request.url))
