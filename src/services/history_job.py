# src/services/history_job.py

"""Batch job that records today's prices into the history price book."""

import csv
import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from src.history.ledger import PriceLedger
from src.history.validator import coerce_price
from src.storage.catalog_store import CatalogStore, history_price_book_id

logger = logging.getLogger("price_history.job")


@dataclass
class PriceObservation:
    """Today's effective price of one item, as computed upstream."""

    item_id: str
    price: float


@dataclass
class JobResult:
    """Counters of a history job run."""

    processed: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    failed: int = 0
    overflowed: int = 0

    @property
    def ok(self) -> bool:
        """True when no item failed."""
        return self.failed == 0


def load_observations(path: Path) -> list[PriceObservation]:
    """Read ``item_id,price`` rows from a CSV file.

    A header row is optional.  Rows without an id or with a
    non-numeric or non-finite price are skipped with a warning.
    """
    observations: list[PriceObservation] = []
    with open(path, newline="", encoding="utf-8") as f:
        for line_no, row in enumerate(csv.reader(f), 1):
            if not row or not row[0].strip():
                continue
            if line_no == 1 and row[0].strip().lower() == "item_id":
                continue
            if len(row) < 2:
                logger.warning("Skipping row %d without price: %r", line_no, row)
                continue
            try:
                price = float(row[1])
            except ValueError:
                price = math.nan
            if not math.isfinite(price):
                logger.warning(
                    "Skipping row %d with invalid price: %r", line_no, row,
                )
                continue
            observations.append(
                PriceObservation(item_id=row[0].strip(), price=price)
            )
    logger.info("Loaded %d price observations from %s", len(observations), path)
    return observations


class HistoryJob:
    """Apply a day's price observations to the stored histories."""

    def __init__(
        self,
        store: CatalogStore,
        price_book_id: str | None = None,
        days_to_keep: int | None = None,
        today: date | None = None,
    ) -> None:
        self.store = store
        self.price_book_id = price_book_id or history_price_book_id()
        self.days_to_keep = days_to_keep
        self.today = today or date.today()

    def process(self, observation: PriceObservation, result: JobResult) -> None:
        """Update one item's history record if its price changed."""
        price = coerce_price(observation.price)
        if price is None or price <= 0:
            logger.debug(
                "Skipping item %s without a valid positive price (%s)",
                observation.item_id,
                observation.price,
            )
            result.skipped += 1
            return

        record = self.store.get_record(observation.item_id, self.price_book_id)
        if record is not None and record.amount == observation.price:
            result.unchanged += 1
            return

        ledger = PriceLedger(
            record.price_info if record else None,
            observation.item_id,
            days_to_keep=self.days_to_keep,
            today=self.today,
        )
        ledger.add_price(observation.price)
        if ledger.is_overflowed:
            result.overflowed += 1

        self.store.write_record(
            observation.item_id,
            self.price_book_id,
            observation.price,
            ledger.to_json(),
        )
        result.updated += 1

    def run(
        self,
        observations: Iterable[PriceObservation],
        on_progress: Callable[[], None] | None = None,
    ) -> JobResult:
        """Process every observation; one failing item does not stop the run."""
        result = JobResult()

        for observation in observations:
            result.processed += 1
            try:
                self.process(observation, result)
            except Exception as exc:
                result.failed += 1
                logger.error(
                    "Failed to update price history for item %s: %s",
                    observation.item_id,
                    exc,
                    exc_info=True,
                )
            if on_progress is not None:
                on_progress()

        logger.info(
            "History job for %s finished: %d processed, %d updated, "
            "%d unchanged, %d skipped, %d failed, %d overflowed",
            self.price_book_id,
            result.processed,
            result.updated,
            result.unchanged,
            result.skipped,
            result.failed,
            result.overflowed,
        )
        return result
