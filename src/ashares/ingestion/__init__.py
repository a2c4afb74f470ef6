"""HTTP transport: shared async and blocking clients."""

from ashares.ingestion.client import (
    AsharesClient,
    BlockingAsharesClient,
    get_blocking_client,
    get_client,
    init_ashares,
    init_ashares_blocking,
    shutdown_ashares,
    shutdown_ashares_blocking,
)

__all__ = [
    "AsharesClient",
    "BlockingAsharesClient",
    "init_ashares",
    "get_client",
    "shutdown_ashares",
    "init_ashares_blocking",
    "get_blocking_client",
    "shutdown_ashares_blocking",
]
