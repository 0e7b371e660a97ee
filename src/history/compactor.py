# src/history/compactor.py

"""Size-driven removal of dominated history entries."""

import logging
from collections.abc import Mapping

from src.history import entry_store

logger = logging.getLogger("price_history.compactor")


class RedundancyCompactor:
    """Shrink a history below a size budget without changing its answers.

    A price is dominated when a later entry carries a lower price: for
    any "lowest price since X" query with X at or after that later
    entry, the earlier, higher price can no longer be the answer.
    """

    @staticmethod
    def find_candidates(entries: Mapping[str, float]) -> list[str]:
        """Return dominated day-keys, oldest first.

        Walks newest to oldest with a running reference price.  A
        strictly higher price is a candidate, a strictly lower one
        becomes the new reference, an equal one is left alone.
        """
        keys = sorted(entries, reverse=True)
        if not keys:
            return []

        reference = entries[keys[0]]
        candidates: list[str] = []

        for key in keys[1:]:
            price = entries[key]
            if price > reference:
                candidates.append(key)
            elif price < reference:
                reference = price

        candidates.reverse()
        return candidates

    @staticmethod
    def compact(
        entries: Mapping[str, float],
        max_size: int,
        item_id: str = "(unknown)",
    ) -> tuple[dict[str, float], int, bool]:
        """Delete dominated entries, oldest first, until the budget fits.

        Size is re-measured after every single deletion, so no more
        entries are removed than needed.  Returns the compacted
        entries, the number deleted and whether the result fits.
        """
        compacted = dict(entries)
        if entry_store.size(compacted) <= max_size:
            return compacted, 0, True

        candidates = RedundancyCompactor.find_candidates(compacted)
        deleted = 0

        for key in candidates:
            if entry_store.size(compacted) <= max_size:
                break
            del compacted[key]
            deleted += 1

        fits = entry_store.size(compacted) <= max_size
        logger.debug(
            "Compaction for item %s removed %d of %d candidates "
            "(size=%d, max=%d, fits=%s)",
            item_id,
            deleted,
            len(candidates),
            entry_store.size(compacted),
            max_size,
            fits,
        )
        return compacted, deleted, fits
