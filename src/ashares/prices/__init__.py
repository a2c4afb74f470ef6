"""Price-bar retrieval from the Tencent and Sina quote endpoints.

Architecture
------------
Each endpoint pairs a request builder with an adapter:

    frequency → PreparedRequest → transport → PriceAdapter → list[PriceBar]

- ``TencentKlineAdapter``: forward-adjusted day / week / month bars.
- ``TencentMinuteAdapter``: minute bars, last close refreshed from the live quote.
- ``SinaKlineAdapter``: bars with optional moving averages.

The async operations live here; ``ashares.blocking`` offers blocking twins
that share the same builders and adapters.
"""

from ashares.prices.frequency import (
    normalize_end_date,
    resolve_kline_unit,
    resolve_minute_scale,
    resolve_sina_scale,
)
from ashares.prices.provider import PreparedRequest, PriceAdapter, decode_json
from ashares.prices.sina import (
    SinaKlineAdapter,
    fetch_with_moving_averages,
    prepare_with_moving_averages,
)
from ashares.prices.tencent import (
    TencentKlineAdapter,
    TencentMinuteAdapter,
    fetch_day_week_month,
    fetch_minute,
    prepare_day_week_month,
    prepare_minute,
)

__all__ = [
    # Operations
    "fetch_day_week_month",
    "fetch_minute",
    "fetch_with_moving_averages",
    # Request builders
    "PreparedRequest",
    "prepare_day_week_month",
    "prepare_minute",
    "prepare_with_moving_averages",
    # Adapters
    "PriceAdapter",
    "TencentKlineAdapter",
    "TencentMinuteAdapter",
    "SinaKlineAdapter",
    "decode_json",
    # Frequency resolution
    "normalize_end_date",
    "resolve_kline_unit",
    "resolve_minute_scale",
    "resolve_sina_scale",
]
