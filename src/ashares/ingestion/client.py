"""Shared HTTP transport for the quote endpoints.

One async client (``httpx.AsyncClient``) and one blocking client
(``httpx.Client``) may each be registered process-wide. Registration happens
exactly once through ``init_ashares()`` / ``init_ashares_blocking()``; a second
call raises ``AlreadyInitializedError`` instead of replacing the handle.
"""

from __future__ import annotations

import logging
import threading

import httpx

from ashares.core.config import AsharesConfig
from ashares.core.exceptions import (
    AlreadyInitializedError,
    TransportError,
    UninitializedClientError,
)

logger = logging.getLogger(__name__)


def _client_kwargs(config: AsharesConfig) -> dict:
    return {
        "headers": {"User-Agent": config.http.user_agent},
        "timeout": httpx.Timeout(config.http.request_timeout),
        "follow_redirects": config.http.follow_redirects,
    }


def _check_response(response: httpx.Response, url: str) -> str:
    if not response.is_success:
        logger.warning("HTTP %d from %s", response.status_code, url)
        raise TransportError(
            f"HTTP {response.status_code} from {url}",
            context={"url": url, "status_code": response.status_code},
        )
    return response.text


class AsharesClient:
    """Async GET-and-return-text transport.

    Use via ``async with AsharesClient(config) as client:`` or register one
    process-wide with ``init_ashares()``.
    """

    def __init__(self, config: AsharesConfig | None = None) -> None:
        self.config = config or AsharesConfig()
        self._client = httpx.AsyncClient(**_client_kwargs(self.config))

    async def __aenter__(self) -> AsharesClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client. Called automatically by __aexit__."""
        await self._client.aclose()

    async def fetch(self, url: str) -> str:
        """GET ``url`` and return the response body as text.

        Raises:
            TransportError: Connection failure, timeout, or non-2xx status.
        """
        logger.debug("GET %s", url)
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            logger.warning("Request to %s failed: %s", url, e)
            raise TransportError(
                f"Request failed: {url}",
                context={"url": url, "error": str(e)},
            ) from e
        return _check_response(response, url)


class BlockingAsharesClient:
    """Blocking twin of ``AsharesClient`` for callers without an event loop."""

    def __init__(self, config: AsharesConfig | None = None) -> None:
        self.config = config or AsharesConfig()
        self._client = httpx.Client(**_client_kwargs(self.config))

    def __enter__(self) -> BlockingAsharesClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def fetch(self, url: str) -> str:
        """GET ``url`` and return the response body as text.

        Raises:
            TransportError: Connection failure, timeout, or non-2xx status.
        """
        logger.debug("GET %s", url)
        try:
            response = self._client.get(url)
        except httpx.HTTPError as e:
            logger.warning("Request to %s failed: %s", url, e)
            raise TransportError(
                f"Request failed: {url}",
                context={"url": url, "error": str(e)},
            ) from e
        return _check_response(response, url)


# --- Process-wide registry ---

_lock = threading.Lock()
_async_client: AsharesClient | None = None
_blocking_client: BlockingAsharesClient | None = None


def init_ashares(config: AsharesConfig | None = None) -> AsharesClient:
    """Create and register the process-wide async client.

    Raises:
        AlreadyInitializedError: If an async client is already registered.
    """
    global _async_client
    with _lock:
        if _async_client is not None:
            raise AlreadyInitializedError(
                "Async client is already initialized",
                context={"flavour": "async"},
            )
        _async_client = AsharesClient(config)
        logger.debug("Initialized shared async client")
        return _async_client


def get_client() -> AsharesClient:
    """Return the registered async client.

    Raises:
        UninitializedClientError: If init_ashares() has not been called.
    """
    client = _async_client
    if client is None:
        raise UninitializedClientError(
            "Async client is not initialized; call init_ashares() first",
            context={"flavour": "async"},
        )
    return client


async def shutdown_ashares() -> None:
    """Close and unregister the async client. No-op if none is registered."""
    global _async_client
    with _lock:
        client, _async_client = _async_client, None
    if client is not None:
        await client.close()


def init_ashares_blocking(config: AsharesConfig | None = None) -> BlockingAsharesClient:
    """Create and register the process-wide blocking client.

    Raises:
        AlreadyInitializedError: If a blocking client is already registered.
    """
    global _blocking_client
    with _lock:
        if _blocking_client is not None:
            raise AlreadyInitializedError(
                "Blocking client is already initialized",
                context={"flavour": "blocking"},
            )
        _blocking_client = BlockingAsharesClient(config)
        logger.debug("Initialized shared blocking client")
        return _blocking_client


def get_blocking_client() -> BlockingAsharesClient:
    """Return the registered blocking client.

    Raises:
        UninitializedClientError: If init_ashares_blocking() has not been called.
    """
    client = _blocking_client
    if client is None:
        raise UninitializedClientError(
            "Blocking client is not initialized; call init_ashares_blocking() first",
            context={"flavour": "blocking"},
        )
    return client


def shutdown_ashares_blocking() -> None:
    """Close and unregister the blocking client. No-op if none is registered."""
    global _blocking_client
    with _lock:
        client, _blocking_client = _blocking_client, None
    if client is not None:
        client.close()
