"""ashares.core — Foundation types, config, and exceptions."""

from ashares.core.config import (
    AsharesConfig,
    HttpConfig,
    SourcesConfig,
    load_config,
)
from ashares.core.exceptions import (
    AlreadyInitializedError,
    AsharesError,
    ClientStateError,
    ConfigError,
    FieldParseError,
    MalformedResponseError,
    TransportError,
    UninitializedClientError,
)
from ashares.core.models import (
    SUPPORTED_MA_PERIODS,
    KlineUnit,
    MovingAverage,
    PriceBar,
    TimeKind,
)

__all__ = [
    # Constants
    "SUPPORTED_MA_PERIODS",
    # Enums
    "KlineUnit",
    "TimeKind",
    # Bar models
    "MovingAverage",
    "PriceBar",
    # Config
    "AsharesConfig",
    "HttpConfig",
    "SourcesConfig",
    "load_config",
    # Exceptions
    "AsharesError",
    "ConfigError",
    "TransportError",
    "MalformedResponseError",
    "FieldParseError",
    "ClientStateError",
    "UninitializedClientError",
    "AlreadyInitializedError",
]
