"""Adapter protocol and shared decode helpers for the quote endpoints.

Architecture
------------
Every public fetch follows the same linear pipeline:

    frequency → PreparedRequest(url, adapter) → transport.fetch → decode_json
              → PriceAdapter.adapt → list[PriceBar]

- **PriceAdapter** turns one decoded JSON payload into ``PriceBar`` records.
  Adapters are pure: no I/O, no shared state, so they can be exercised
  directly against captured payloads.

- **PreparedRequest** bundles the URL with the adapter that understands its
  response, letting the async and blocking operations share everything but
  the fetch itself.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Protocol, runtime_checkable

from ashares.core.exceptions import FieldParseError, MalformedResponseError
from ashares.core.models import PriceBar

logger = logging.getLogger(__name__)


@runtime_checkable
class PriceAdapter(Protocol):
    """Transforms a decoded endpoint payload into PriceBar records.

    Parameters
    ----------
    payload : Any
        The decoded JSON body. The adapter knows the expected shape.
    code : str
        The security code the request was made for (e.g. "sh600000").

    Returns
    -------
    list[PriceBar]
        Bars in source order (oldest first).

    Raises
    ------
    MalformedResponseError
        The payload lacks the expected structure.
    FieldParseError
        A bar field cannot be parsed.
    """

    def adapt(self, payload: Any, code: str) -> list[PriceBar]: ...


@dataclass(frozen=True)
class PreparedRequest:
    """A fully-built request: where to GET and how to read the answer."""

    code: str
    url: str
    adapter: PriceAdapter

    def parse(self, text: str) -> list[PriceBar]:
        """Decode and adapt a response body fetched from ``self.url``."""
        try:
            bars = self.adapter.adapt(decode_json(text, self.url), self.code)
        except MalformedResponseError as e:
            e.context.setdefault("url", self.url)
            raise
        logger.debug("Parsed %d bars for %s", len(bars), self.code)
        return bars


def decode_json(text: str, url: str | None = None) -> Any:
    """Parse a response body as JSON.

    Raises:
        MalformedResponseError: If the body is not valid JSON.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(
            f"Response is not valid JSON: {e.msg}",
            context={"url": url, "body": text[:200]},
        ) from e


def require_positive_count(count: int) -> int:
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise ValueError(f"count must be a positive integer, got {count!r}")
    return count


def decimal_from_string(text: str) -> float:
    """``float(text)`` restricted to plain ASCII decimals.

    Python's ``float`` also takes "1_000", surrounding whitespace and
    non-ASCII digits; the feeds never send those, so they are rejected.
    """
    if not text.isascii() or "_" in text or text != text.strip():
        raise ValueError(f"not a plain decimal string: {text!r}")
    return float(text)


def parse_number(raw: Any, field: str, index: int) -> float:
    """Parse a numeric field delivered as a decimal string ("12.34")."""
    if not isinstance(raw, str):
        raise FieldParseError(
            f"Bar {index}: {field} must be a numeric string, got {type(raw).__name__}",
            context={"field": field, "value": raw, "index": index},
        )
    try:
        return decimal_from_string(raw)
    except ValueError as e:
        raise FieldParseError(
            f"Bar {index}: cannot parse {field} from {raw!r}",
            context={"field": field, "value": raw, "index": index},
        ) from e


def parse_date(raw: Any, fmt: str, index: int) -> date:
    return parse_datetime(raw, (fmt,), index).date()


def parse_datetime(raw: Any, formats: tuple[str, ...], index: int) -> datetime:
    """Parse a timestamp string against each format in turn."""
    if not isinstance(raw, str):
        raise FieldParseError(
            f"Bar {index}: time must be a string, got {type(raw).__name__}",
            context={"field": "time", "value": raw, "index": index},
        )
    for fmt in formats:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    raise FieldParseError(
        f"Bar {index}: cannot parse time from {raw!r}",
        context={"field": "time", "value": raw, "index": index, "formats": list(formats)},
    )


def json_number(raw: Any) -> float | None:
    """Return ``raw`` as float if it is a JSON number (not bool), else None."""
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    return float(raw)
