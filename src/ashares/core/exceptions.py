"""Custom exception hierarchy for ashares."""

from typing import Any


class AsharesError(Exception):
    """Base exception for all ashares errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(AsharesError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Should be treated as fatal.

    Context keys:
        field: str — the config field that failed validation
        value: Any — the invalid value
    """


class TransportError(AsharesError):
    """The HTTP exchange with a quote endpoint failed.

    Policy: propagate to the caller. Retrying is the caller's decision.

    Context keys:
        url: str — the URL that was being fetched
        status_code: int | None — HTTP status for non-2xx responses
        error: str | None — the underlying httpx error message
    """


class MalformedResponseError(AsharesError):
    """The response body is not JSON or lacks the expected structure.

    Policy: abort the whole call. No partial bar list is returned.

    Context keys:
        url: str — the URL the body came from (when known)
        code: str — the security code being parsed
        key: str — the key or path that was missing
    """


class FieldParseError(MalformedResponseError):
    """A numeric or date/time field could not be parsed.

    Context keys:
        field: str — "open", "close", "time", ...
        value: Any — the offending raw value
        index: int — position of the bar in the source array
    """


class ClientStateError(AsharesError):
    """The shared HTTP client is not in the state the operation needs."""


class UninitializedClientError(ClientStateError):
    """An operation needed the shared client before init_ashares() ran."""


class AlreadyInitializedError(ClientStateError):
    """init_ashares() was called while a shared client already exists."""
