# src/history/ledger.py

"""Bounded per-item price history for "prior lowest price" disclosure.

A ledger is built from the snapshot stored on a catalog record, used
for one write or one read, and written back with :meth:`to_json`.
Every mutation re-runs the cleanup pipeline:

1. drop invalid entries (bad day-key or price),
2. drop entries whose price stopped applying before the window,
3. if the encoding is still too large, drop dominated entries,
4. if that is not enough, discard the history (overflow).
"""

import json
import logging
from datetime import date

from src.config.settings import Settings
from src.history import entry_store
from src.history.compactor import RedundancyCompactor
from src.history.pruner import RetentionPruner
from src.history.validator import EntryValidator, coerce_price
from src.models.price_entry import DecodedHistory, PriceEntry

logger = logging.getLogger("price_history.ledger")


class PriceLedger:
    """Price history of a single catalog item."""

    def __init__(
        self,
        price_info: str | None,
        item_id: str | None = None,
        days_to_keep: int | None = None,
        today: date | None = None,
        max_size: int | None = None,
    ) -> None:
        self.item_id: str = item_id or "(unknown)"
        self.days_to_keep: int = days_to_keep or Settings.DAYS_TO_KEEP
        self.max_size: int = max_size or Settings.MAX_SIZE
        self.today: date = today or date.today()

        if self.days_to_keep < 1:
            raise ValueError(
                f"days_to_keep must be positive, got {self.days_to_keep}"
            )
        if self.max_size < 1:
            raise ValueError(
                f"max_size must be positive, got {self.max_size}"
            )

        self._snapshot = price_info
        self._decoded: DecodedHistory = entry_store.decode(
            price_info, self.item_id,
        )
        self._entries: dict[str, object] = dict(self._decoded.entries)
        self._overflowed = False

    # ── State ────────────────────────────────────────────

    @property
    def decode_status(self) -> str:
        """How the snapshot decoded: ok, empty, invalid or overflow."""
        return self._decoded.status

    @property
    def entries(self) -> dict[str, object]:
        """Copy of the current entries, in ascending day-key order."""
        return {key: self._entries[key] for key in sorted(self._entries)}

    @property
    def is_overflowed(self) -> bool:
        """True once the history was discarded for exceeding the budget."""
        return self._overflowed

    @property
    def size(self) -> int:
        """Length of the persisted form."""
        return len(self.to_json())

    def price_entries(self) -> list[PriceEntry]:
        """Valid entries as typed records, oldest first."""
        valid, _ = EntryValidator.remove_invalid(self._entries, self.item_id)
        return entry_store.to_entries(valid)

    # ── Reads ────────────────────────────────────────────

    def get_latest_price(self) -> float | None:
        """Price of the newest valid entry, or ``None`` if there is none."""
        for key in sorted(self._entries, reverse=True):
            if entry_store.parse_day_key(key) is None:
                continue
            price = coerce_price(self._entries[key])
            if price is not None:
                return price
        return None

    def get_display_amount(self) -> float | None:
        """Lowest price in effect during the retention window.

        Invalid and outdated entries are removed first so a read-only
        consumer never sees stale history.  Returns ``None`` when no
        history is left.
        """
        self.remove_invalid_entries()
        self.remove_outdated_entries()

        prices = [
            price
            for price in map(coerce_price, self._entries.values())
            if price is not None
        ]
        return min(prices) if prices else None

    # ── Writes ───────────────────────────────────────────

    def add_price(self, price: object) -> bool:
        """Record today's price if it differs from the latest one.

        Non-numeric, non-finite, zero and negative values are ignored
        without a diagnostic.  Returns whether an entry was written.
        """
        value = coerce_price(price)
        if value is None or value <= 0:
            return False

        if value == self.get_latest_price():
            return False

        today_key = entry_store.format_day_key(self.today)
        self._entries[today_key] = (
            price if isinstance(price, (int, float)) else value
        )
        self._overflowed = False
        logger.debug(
            "Added price %s for item %s on %s", value, self.item_id, today_key,
        )

        self.cleanup()
        return True

    # ── Cleanup pipeline ─────────────────────────────────

    def remove_invalid_entries(self) -> int:
        """Drop entries with an unparseable day or a non-numeric price."""
        valid, dropped = EntryValidator.remove_invalid(
            self._entries, self.item_id,
        )
        if dropped:
            self._entries = dict(valid)
        return dropped

    def remove_outdated_entries(self) -> int:
        """Drop entries whose price stopped applying before the window."""
        valid, _ = EntryValidator.remove_invalid(self._entries, self.item_id)
        kept, removed = RetentionPruner.prune(
            valid, self.today, self.days_to_keep, self.item_id,
        )
        if removed:
            self._entries = {
                key: value
                for key, value in self._entries.items()
                if key in kept or key not in valid
            }
        return removed

    def remove_overhead(self) -> int:
        """Drop dominated entries until the history fits ``max_size``.

        Falls back to :meth:`handle_overflow` when every remaining
        entry is a record low and the history is still too large.
        """
        if entry_store.size(self._entries) <= self.max_size:
            return 0

        valid, _ = EntryValidator.remove_invalid(self._entries, self.item_id)
        compacted, deleted, fits = RedundancyCompactor.compact(
            valid, self.max_size, self.item_id,
        )
        self._entries = dict(compacted)

        if not fits:
            self.handle_overflow()
        return deleted

    def handle_overflow(self) -> None:
        """Discard the history and persist the overflow sentinel instead.

        Logged at ERROR with both payloads so the history can be
        recovered by hand.
        """
        logger.error(
            "Price history overflow, unable to shrink below %d characters. "
            "Item: %s; Snapshot: %s; Payload: %s",
            self.max_size,
            self.item_id,
            self._snapshot,
            entry_store.encode(self._entries),
        )
        self._entries = {}
        self._overflowed = True

    def cleanup(self) -> None:
        """Run validation, retention pruning and compaction in order."""
        self.remove_invalid_entries()
        self.remove_outdated_entries()
        self.remove_overhead()

    # ── Persistence ──────────────────────────────────────

    def to_json(self) -> str:
        """Persisted form: the price map, or the overflow sentinel."""
        if self._overflowed:
            return json.dumps(Settings.OVERFLOW_SENTINEL)
        return entry_store.encode(self._entries)
