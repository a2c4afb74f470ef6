"""ashares: A-share price bars from the Tencent and Sina quote endpoints."""

__version__ = "0.1.0"

from ashares.core import (
    AlreadyInitializedError,
    AsharesConfig,
    AsharesError,
    FieldParseError,
    MalformedResponseError,
    MovingAverage,
    PriceBar,
    TimeKind,
    TransportError,
    UninitializedClientError,
    load_config,
)
from ashares.ingestion import (
    AsharesClient,
    BlockingAsharesClient,
    init_ashares,
    init_ashares_blocking,
    shutdown_ashares,
    shutdown_ashares_blocking,
)
from ashares.prices import (
    fetch_day_week_month,
    fetch_minute,
    fetch_with_moving_averages,
)

__all__ = [
    "__version__",
    "fetch_day_week_month",
    "fetch_minute",
    "fetch_with_moving_averages",
    "init_ashares",
    "init_ashares_blocking",
    "shutdown_ashares",
    "shutdown_ashares_blocking",
    "AsharesClient",
    "BlockingAsharesClient",
    "AsharesConfig",
    "load_config",
    "PriceBar",
    "MovingAverage",
    "TimeKind",
    "AsharesError",
    "TransportError",
    "MalformedResponseError",
    "FieldParseError",
    "UninitializedClientError",
    "AlreadyInitializedError",
]
