# tests/test_history_job.py

"""Tests for the history batch job."""

import json
import sqlite3
import tempfile
import unittest
from datetime import date, timedelta
from pathlib import Path
from unittest.mock import patch

from src.services.history_job import (
    HistoryJob,
    PriceObservation,
    load_observations,
)
from src.storage.catalog_store import CatalogStore

BOOK = "shop-default-price-history"
DAY_1 = date(2026, 4, 1)


class TestLoadObservations(unittest.TestCase):
    """CSV loading of price observations."""

    def setUp(self) -> None:
        self.tmp_dir = Path(tempfile.mkdtemp())

    def _write(self, text: str) -> Path:
        path = self.tmp_dir / "prices.csv"
        path.write_text(text, encoding="utf-8")
        return path

    def test_reads_rows_with_header(self) -> None:
        """The header row is skipped and prices parsed."""
        path = self._write("item_id,price\nSKU-1,9.99\nSKU-2,15\n")
        observations = load_observations(path)
        self.assertEqual(
            observations,
            [
                PriceObservation("SKU-1", 9.99),
                PriceObservation("SKU-2", 15.0),
            ],
        )

    def test_skips_malformed_rows(self) -> None:
        """Rows without a price or with a bad price are skipped."""
        path = self._write("SKU-1,abc\nSKU-2\n,5\n\nSKU-3,1.5\n")
        observations = load_observations(path)
        self.assertEqual(observations, [PriceObservation("SKU-3", 1.5)])


class TestHistoryJob(unittest.TestCase):
    """HistoryJob.run behaviour."""

    def setUp(self) -> None:
        self.tmp_dir = tempfile.mkdtemp()
        self.store = CatalogStore(db_path=Path(self.tmp_dir) / "test.db")

    def tearDown(self) -> None:
        self.store.close()

    def _job(self, today: date = DAY_1) -> HistoryJob:
        return HistoryJob(self.store, price_book_id=BOOK, today=today)

    def _history(self, item_id: str) -> dict[str, float]:
        info = self.store.get_price_info(item_id, BOOK)
        assert info is not None
        return json.loads(info)

    def test_first_run_creates_records(self) -> None:
        """New items get a one-entry history."""
        result = self._job().run([
            PriceObservation("SKU-1", 9.99),
            PriceObservation("SKU-2", 4.5),
        ])
        self.assertEqual(result.processed, 2)
        self.assertEqual(result.updated, 2)
        self.assertTrue(result.ok)
        self.assertEqual(self._history("SKU-1"), {"20260401": 9.99})

    def test_unchanged_price_is_skipped(self) -> None:
        """The record is not touched when the amount is the same."""
        self._job().run([PriceObservation("SKU-1", 9.99)])
        result = self._job(DAY_1 + timedelta(days=1)).run(
            [PriceObservation("SKU-1", 9.99)],
        )
        self.assertEqual(result.unchanged, 1)
        self.assertEqual(result.updated, 0)
        self.assertEqual(self._history("SKU-1"), {"20260401": 9.99})

    def test_changed_price_appends(self) -> None:
        """A new price is added on the run's day."""
        self._job().run([PriceObservation("SKU-1", 9.99)])
        self._job(DAY_1 + timedelta(days=3)).run(
            [PriceObservation("SKU-1", 7.99)],
        )
        self.assertEqual(
            self._history("SKU-1"), {"20260401": 9.99, "20260404": 7.99},
        )
        record = self.store.get_record("SKU-1", BOOK)
        assert record is not None
        self.assertEqual(record.amount, 7.99)

    def test_non_positive_prices_skipped(self) -> None:
        """Zero and negative observations are not recorded."""
        result = self._job().run([
            PriceObservation("SKU-1", 0.0),
            PriceObservation("SKU-2", -3.0),
        ])
        self.assertEqual(result.skipped, 2)
        self.assertIsNone(self.store.get_record("SKU-1", BOOK))

    def test_non_finite_prices_skipped(self) -> None:
        """NaN and infinite observations are not recorded."""
        result = self._job().run([
            PriceObservation("SKU-1", float("inf")),
            PriceObservation("SKU-2", float("nan")),
        ])
        self.assertEqual(result.skipped, 2)
        self.assertEqual(result.updated, 0)
        self.assertEqual(result.failed, 0)
        self.assertIsNone(self.store.get_record("SKU-1", BOOK))
        self.assertIsNone(self.store.get_record("SKU-2", BOOK))

    def test_non_finite_rows_skipped_on_load(self) -> None:
        """CSV rows with nan or inf prices never become observations."""
        path = Path(self.tmp_dir) / "prices.csv"
        path.write_text("SKU-1,nan\nSKU-2,inf\nSKU-3,2.5\n", encoding="utf-8")
        with self.assertLogs("price_history.job", level="WARNING"):
            observations = load_observations(path)
        self.assertEqual(observations, [PriceObservation("SKU-3", 2.5)])

    def test_failure_does_not_stop_run(self) -> None:
        """A storage error on one item is counted and logged."""
        original = self.store.write_record

        def flaky(item_id: str, *args: object, **kwargs: object) -> None:
            if item_id == "SKU-1":
                raise sqlite3.OperationalError("database is locked")
            original(item_id, *args, **kwargs)  # type: ignore[arg-type]

        with patch.object(self.store, "write_record", side_effect=flaky):
            with self.assertLogs("price_history.job", level="ERROR"):
                result = self._job().run([
                    PriceObservation("SKU-1", 1.0),
                    PriceObservation("SKU-2", 2.0),
                ])
        self.assertEqual(result.failed, 1)
        self.assertEqual(result.updated, 1)
        self.assertFalse(result.ok)
        self.assertIsNotNone(self.store.get_record("SKU-2", BOOK))

    def test_overflow_is_counted_and_persisted(self) -> None:
        """An unshrinkable history is written back as the sentinel."""
        rising = {
            (DAY_1 - timedelta(days=20 - i)).strftime("%Y%m%d"): round(
                1.0 + i * 0.01, 2,
            )
            for i in range(20)
        }
        self.store.write_record("SKU-1", BOOK, 1.19, json.dumps(rising))
        with self.assertLogs("price_history.ledger", level="ERROR"):
            result = self._job().run([PriceObservation("SKU-1", 1.25)])
        self.assertEqual(result.overflowed, 1)
        self.assertEqual(
            self.store.get_price_info("SKU-1", BOOK), '"Dataset too large!"',
        )

    def test_progress_callback(self) -> None:
        """The progress callback fires once per observation."""
        ticks: list[int] = []
        self._job().run(
            [PriceObservation("SKU-1", 1.0), PriceObservation("SKU-2", 2.0)],
            on_progress=lambda: ticks.append(1),
        )
        self.assertEqual(len(ticks), 2)


if __name__ == "__main__":
    unittest.main()
