# src/storage/catalog_store.py

"""SQLite-backed catalog price-book records carrying price history."""

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

logger = logging.getLogger("price_history.catalog")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS price_records (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id       TEXT    NOT NULL,
    price_book_id TEXT    NOT NULL,
    amount        REAL    NOT NULL,
    price_info    TEXT,
    updated_at    TEXT    NOT NULL,
    UNIQUE (item_id, price_book_id)
);

CREATE INDEX IF NOT EXISTS idx_records_book
    ON price_records(price_book_id);
"""


def history_price_book_id(
    country: str | None = None, site_id: str | None = None,
) -> str:
    """Name of the price book holding history for a country."""
    site = site_id or Settings.SITE_ID
    return f"{site}-{country or 'default'}-price-history"


@dataclass
class PriceRecord:
    """One item's entry in a price book."""

    item_id: str
    price_book_id: str
    amount: float
    price_info: str | None
    updated_at: datetime


class CatalogStore:
    """SQLite store for price-book records and their history snapshots."""

    def __init__(
        self, db_path: Path | None = None,
    ) -> None:
        path = db_path or Settings.CATALOG_DB_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            str(path), check_same_thread=False,
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)
        logger.debug("CatalogStore opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # ── Reading ──────────────────────────────────────────

    def get_record(
        self, item_id: str, price_book_id: str,
    ) -> PriceRecord | None:
        """Return the record of an item in a price book, if any."""
        row = self._conn.execute(
            "SELECT item_id, price_book_id, amount, price_info, updated_at "
            "FROM price_records "
            "WHERE item_id = ? AND price_book_id = ?",
            (item_id, price_book_id),
        ).fetchone()
        if row is None:
            return None
        return PriceRecord(
            item_id=row[0],
            price_book_id=row[1],
            amount=row[2],
            price_info=row[3],
            updated_at=datetime.fromisoformat(row[4]),
        )

    def get_price_info(
        self, item_id: str, price_book_id: str,
    ) -> str | None:
        """Return the stored history snapshot, or ``None``."""
        record = self.get_record(item_id, price_book_id)
        return record.price_info if record else None

    def has_price_book(self, price_book_id: str) -> bool:
        """True if at least one record exists in the price book."""
        row = self._conn.execute(
            "SELECT 1 FROM price_records WHERE price_book_id = ? LIMIT 1",
            (price_book_id,),
        ).fetchone()
        return row is not None

    def list_items(self, price_book_id: str) -> list[str]:
        """All item ids recorded in a price book, sorted."""
        rows = self._conn.execute(
            "SELECT item_id FROM price_records "
            "WHERE price_book_id = ? ORDER BY item_id",
            (price_book_id,),
        ).fetchall()
        return [r[0] for r in rows]

    # ── Writing ──────────────────────────────────────────

    def write_record(
        self,
        item_id: str,
        price_book_id: str,
        amount: float,
        price_info: str | None,
        updated_at: datetime | None = None,
    ) -> None:
        """Insert or replace an item's record (last writer wins)."""
        ts = (updated_at or datetime.now()).isoformat()
        self._conn.execute(
            "INSERT INTO price_records "
            "(item_id, price_book_id, amount, price_info, updated_at) "
            "VALUES (?, ?, ?, ?, ?) "
            "ON CONFLICT(item_id, price_book_id) DO UPDATE SET "
            "amount=excluded.amount, "
            "price_info=excluded.price_info, "
            "updated_at=excluded.updated_at",
            (item_id, price_book_id, amount, price_info, ts),
        )
        self._conn.commit()
        logger.debug(
            "Wrote record for item %s in %s (amount=%s, %d chars of history)",
            item_id,
            price_book_id,
            amount,
            len(price_info or ""),
        )
