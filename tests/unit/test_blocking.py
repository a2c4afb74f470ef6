"""Tests for ashares.blocking."""

from __future__ import annotations

from datetime import date

import httpx
import pytest
import respx

from ashares import blocking
from ashares.core.config import AsharesConfig, SourcesConfig
from ashares.core.exceptions import MalformedResponseError, UninitializedClientError
from ashares.ingestion.client import BlockingAsharesClient, init_ashares_blocking

LOCAL = SourcesConfig(
    tencent_kline_url="http://127.0.0.1:9999/fqkline/get",
    tencent_minute_url="http://127.0.0.1:9999/mkline",
    sina_kline_url="http://127.0.0.1:9999/getKLineData",
)


@pytest.fixture
def client():
    with BlockingAsharesClient(AsharesConfig(sources=LOCAL)) as c:
        yield c


class TestBlockingOperations:
    def test_requires_initialized_client(self):
        with pytest.raises(UninitializedClientError):
            blocking.fetch_minute("sh600000", 10, "1m")

    @respx.mock
    def test_day_week_month_uses_configured_base(self, client, tencent_index_day_payload):
        route = respx.get(url__startswith=LOCAL.tencent_kline_url).mock(
            return_value=httpx.Response(200, json=tencent_index_day_payload)
        )

        bars = blocking.fetch_day_week_month("sh000001", None, 3, "1d", client=client)

        assert [b.time for b in bars] == [date(2025, 1, 20), date(2025, 1, 21), date(2025, 1, 22)]
        assert route.called

    @respx.mock
    def test_minute_on_shared_client(self, tencent_minute_payload):
        respx.get(url__startswith=LOCAL.tencent_minute_url).mock(
            return_value=httpx.Response(200, json=tencent_minute_payload)
        )
        init_ashares_blocking(AsharesConfig(sources=LOCAL))

        bars = blocking.fetch_minute("sh600000", 3, "5m")

        assert bars[-1].close == 10.18

    @respx.mock
    def test_moving_averages(self, client, sina_daily_payload):
        respx.get(url__startswith=LOCAL.sina_kline_url).mock(
            return_value=httpx.Response(200, json=sina_daily_payload)
        )

        bars = blocking.fetch_with_moving_averages("sh000001", 2, "1d", [5, 15, 20], client=client)

        assert bars[0].moving_averages[0].period == 5
        assert bars[1].moving_average(20) is None

    @respx.mock
    def test_malformed_body_raises(self, client):
        respx.get(url__startswith=LOCAL.tencent_kline_url).mock(
            return_value=httpx.Response(200, text="")
        )
        with pytest.raises(MalformedResponseError):
            blocking.fetch_day_week_month("sh000001", None, 3, "1d", client=client)
