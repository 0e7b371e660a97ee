# src/history/entry_store.py

"""Persisted form of a price history: decode, encode, size and latest.

Snapshot format (compact JSON object, keys in ascending order)::

    {"20260101":9.99,"20260102":8.49,"20260115":9.99}

Each key is the first day (``YYYYMMDD``) a price became effective.
Keys are fixed-width and zero-padded, so sorting them as strings
sorts them chronologically; every ordering in this package relies
on that.
"""

import json
import logging
import re
from collections.abc import Mapping
from datetime import date, datetime

from src.config.settings import Settings
from src.models.price_entry import DecodedHistory, PriceEntry

logger = logging.getLogger("price_history.entry_store")

_DAY_KEY_RE = re.compile(r"^\d{8}$")


def format_day_key(day: date) -> str:
    """Render a calendar day as a ``YYYYMMDD`` key."""
    return f"{day.year:04d}{day.month:02d}{day.day:02d}"


def parse_day_key(key: object) -> date | None:
    """Parse a ``YYYYMMDD`` key, or return ``None`` if it is not a real day."""
    if not isinstance(key, str) or not _DAY_KEY_RE.match(key):
        return None
    try:
        return datetime.strptime(key, Settings.DAY_KEY_FORMAT).date()
    except ValueError:
        return None


def decode(text: str | None, item_id: str = "(unknown)") -> DecodedHistory:
    """Decode a persisted snapshot without ever raising.

    Absent or blank text is an empty history.  Anything that is not a
    JSON object (including the overflow sentinel) is "no usable
    history" and is reported with its payload.
    """
    if text is None or not text.strip():
        logger.debug("No price history stored for item %s", item_id)
        return DecodedHistory(status="empty")

    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError, RecursionError) as exc:
        logger.warning(
            "Invalid price history JSON for item %s: %s (payload=%r)",
            item_id,
            exc,
            text,
        )
        return DecodedHistory(status="invalid")

    if data == Settings.OVERFLOW_SENTINEL:
        logger.info(
            "Price history for item %s was discarded after an overflow",
            item_id,
        )
        return DecodedHistory(status="overflow")

    if not isinstance(data, dict):
        logger.warning(
            "Price history for item %s is not a price map (payload=%r)",
            item_id,
            text,
        )
        return DecodedHistory(status="invalid")

    return DecodedHistory(status="ok", entries=dict(data))


def encode(entries: Mapping[str, object]) -> str:
    """Canonical compact JSON, keys in ascending day-key order."""
    ordered = {key: entries[key] for key in sorted(entries)}
    return json.dumps(ordered, separators=(",", ":"))


def size(entries: Mapping[str, object]) -> int:
    """Length of the canonical encoding, compared against ``MAX_SIZE``."""
    return len(encode(entries))


def latest(entries: Mapping[str, object]) -> object | None:
    """Value of the chronologically last entry, or ``None`` if empty."""
    if not entries:
        return None
    return entries[max(entries)]


def to_entries(entries: Mapping[str, float]) -> list[PriceEntry]:
    """Typed entries, oldest first."""
    return [
        PriceEntry(day_key=key, price=entries[key])
        for key in sorted(entries)
    ]
