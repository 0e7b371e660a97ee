# src/history/pruner.py

"""Retention pruning based on each entry's valid-to boundary."""

import logging
from collections.abc import Mapping
from datetime import date, timedelta

from src.history.entry_store import parse_day_key

logger = logging.getLogger("price_history.pruner")


def retention_cutoff(today: date, days_to_keep: int) -> date:
    """First day whose effective price is still inside the window.

    The window includes today, hence ``days_to_keep - 1``.
    """
    return today - timedelta(days=days_to_keep - 1)


class RetentionPruner:
    """Drop entries whose price stopped applying before the window."""

    @staticmethod
    def prune(
        entries: Mapping[str, float],
        today: date,
        days_to_keep: int,
        item_id: str = "(unknown)",
    ) -> tuple[dict[str, float], int]:
        """Remove entries whose valid-to boundary lies before the cutoff.

        An entry's valid-to boundary is the day-key of its chronological
        successor.  The newest entry is open-ended and always kept; an
        older entry whose own day is before the cutoff stays as long as
        its successor starts on or after the cutoff, because it was the
        price in force when the window began.

        Expects validated entries.  Returns the kept entries and the
        count of removed ones.
        """
        cutoff = retention_cutoff(today, days_to_keep)
        keys = sorted(entries)
        outdated: list[str] = []

        for valid_from, valid_to in zip(keys, keys[1:]):
            boundary = parse_day_key(valid_to)
            if boundary is not None and boundary < cutoff:
                outdated.append(valid_from)

        if not outdated:
            return dict(entries), 0

        removed = set(outdated)
        kept = {key: entries[key] for key in keys if key not in removed}
        logger.debug(
            "Pruned %d outdated entries for item %s (cutoff=%s): %s",
            len(outdated),
            item_id,
            cutoff.isoformat(),
            ", ".join(outdated),
        )
        return kept, len(outdated)
