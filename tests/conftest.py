"""Shared pytest fixtures for ashares."""

import pytest

from ashares.core.config import AsharesConfig
from ashares.ingestion import client as client_module


@pytest.fixture(autouse=True)
def _reset_shared_clients(monkeypatch):
    """Give every test empty process-wide client slots."""
    monkeypatch.setattr(client_module, "_async_client", None)
    monkeypatch.setattr(client_module, "_blocking_client", None)


@pytest.fixture
def config() -> AsharesConfig:
    return AsharesConfig()


@pytest.fixture
def tencent_index_day_payload() -> dict:
    """fqkline response for an index: bars under the plain 'day' key."""
    return {
        "code": 0,
        "msg": "",
        "data": {
            "sh000001": {
                "day": [
                    ["2025-01-20", "3241.82", "3244.38", "3256.85", "3236.62", "366284905.00"],
                    ["2025-01-21", "3245.10", "3242.62", "3249.03", "3228.98", "361012563.00"],
                    ["2025-01-22", "3239.66", "3213.62", "3240.43", "3211.58", "356748105.00"],
                ],
                "qt": {},
                "version": "12",
            }
        },
    }


@pytest.fixture
def tencent_stock_day_payload() -> dict:
    """fqkline response for a stock: both 'qfqday' and 'day' present."""
    return {
        "code": 0,
        "msg": "",
        "data": {
            "sh600000": {
                "qfqday": [
                    ["2024-07-15", "8.120", "8.150", "8.190", "8.090", "402315.000"],
                    [
                        "2024-07-16",
                        "8.150",
                        "8.210",
                        "8.230",
                        "8.130",
                        "515702.000",
                        {"nd": "2023", "fh_sh": "3.2", "djr": "2024-07-16"},
                    ],
                ],
                "day": [
                    ["2024-07-15", "8.440", "8.470", "8.510", "8.410", "402315.000"],
                    ["2024-07-16", "8.470", "8.530", "8.550", "8.450", "515702.000"],
                ],
            }
        },
    }


@pytest.fixture
def tencent_minute_payload() -> dict:
    """mkline response with a live quote for the security."""
    return {
        "code": 0,
        "msg": "",
        "data": {
            "sh600000": {
                "m5": [
                    ["202501201445", "10.12", "10.15", "10.16", "10.11", "12345.00", {}, "0.0"],
                    ["202501201450", "10.15", "10.13", "10.17", "10.12", "9876.00", {}, "0.0"],
                    ["202501201455", "10.13", "10.14", "10.15", "10.12", "15432.00", {}, "0.0"],
                ],
                "qt": {
                    "sh600000": ["1", "浦发银行", "600000", "10.18", "10.09", "10.10"],
                    "market": ["2025-01-20 14:57:01|HK_close_已休市"],
                },
            }
        },
    }


@pytest.fixture
def sina_daily_payload() -> list[dict]:
    """getKLineData response at scale=240 with ma=5,15,20."""
    return [
        {
            "day": "2025-01-20",
            "open": "3241.824",
            "high": "3256.854",
            "low": "3236.623",
            "close": "3244.378",
            "volume": "36628490500",
            "ma_price5": 3232.61,
            "ma_volume5": 35012345600,
        },
        {
            "day": "2025-01-21",
            "open": "3245.101",
            "high": "3249.032",
            "low": "3228.984",
            "close": "3242.623",
            "volume": "36101256300",
            "ma_price5": 3238.21,
            "ma_volume5": 35522345600,
            "ma_price15": 3221.07,
            "ma_volume15": 34011223300,
            "ma_price20": 3230.4,
        },
    ]
