# src/history/validator.py

"""Entry validation: drop entries with a bad day-key or a bad price."""

import logging
import math
from collections.abc import Mapping

from src.history.entry_store import parse_day_key

logger = logging.getLogger("price_history.validator")


def coerce_price(value: object) -> float | None:
    """Convert a stored value to a finite, non-negative price.

    Numbers and numeric strings are accepted.  Booleans and ``null``
    are not prices even though they convert.
    """
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        price = float(value)
    except ValueError:
        return None
    if not math.isfinite(price) or price < 0:
        return None
    return price


class EntryValidator:
    """Remove entries that cannot take part in history calculations."""

    @staticmethod
    def remove_invalid(
        entries: Mapping[str, object],
        item_id: str = "(unknown)",
    ) -> tuple[dict[str, float], int]:
        """Keep entries with a real ``YYYYMMDD`` day and a valid price.

        Returns the typed surviving entries and the count of dropped ones.
        """
        valid: dict[str, float] = {}
        dropped = 0

        for key, value in entries.items():
            if parse_day_key(key) is None:
                logger.debug(
                    "Dropped entry with unparseable day %r (item=%s)",
                    key,
                    item_id,
                )
                dropped += 1
                continue
            price = coerce_price(value)
            if price is None:
                logger.debug(
                    "Dropped entry %s with invalid price %r (item=%s)",
                    key,
                    value,
                    item_id,
                )
                dropped += 1
                continue
            # Numbers are stored unchanged, numeric strings as floats
            valid[key] = value if isinstance(value, (int, float)) else price

        if dropped:
            logger.info(
                "Validation dropped %d invalid entries for item %s",
                dropped,
                item_id,
            )

        return valid, dropped
