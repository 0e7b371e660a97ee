# src/cli/runner.py

"""Headless commands: history job, ledger inspection, prior best price."""

import json
import logging
import sys
from datetime import date, datetime
from pathlib import Path

from rich.console import Console
from rich.progress import Progress
from rich.table import Table

from src.config.settings import Settings
from src.history.ledger import PriceLedger
from src.services.history_job import HistoryJob, load_observations
from src.services.lookup import PriorBestPriceLookup
from src.storage.catalog_store import CatalogStore, history_price_book_id

logger = logging.getLogger("price_history.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def parse_day(value: str | None) -> date | None:
    """Parse a ``YYYYMMDD`` command-line date.

    Raises ``SystemExit`` on malformed input.
    """
    if value is None:
        return None
    try:
        return datetime.strptime(value, Settings.DAY_KEY_FORMAT).date()
    except ValueError:
        _err.print(f"[red]Invalid date '{value}', expected YYYYMMDD[/red]")
        raise SystemExit(1)


def _print_ledger_table(ledger: PriceLedger, display: float | None) -> None:
    """Render a Rich table of the ledger entries to stdout."""
    table = Table(
        title=f"Price History: {ledger.item_id}",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Valid from")
    table.add_column("Price", justify="right", style="green")

    for idx, entry in enumerate(ledger.price_entries(), 1):
        price_str = f"{entry.price:,.2f}"
        if display is not None and entry.price == display:
            price_str = f"[bold]{price_str}[/bold]"
        table.add_row(str(idx), entry.day_key, price_str)

    Console().print(table)


def run_history_job(
    csv_path: str,
    price_book_id: str | None = None,
    today: date | None = None,
    db_path: Path | None = None,
) -> int:
    """Apply a CSV of ``item_id,price`` rows to the history price book."""
    path = Path(csv_path)
    if not path.exists():
        _err.print(f"[red]File not found: {path}[/red]")
        return 1

    observations = load_observations(path)
    if not observations:
        _err.print("[yellow]No price observations found.[/yellow]")
        return 0

    store = CatalogStore(db_path)
    job = HistoryJob(store, price_book_id=price_book_id, today=today)
    _err.print(
        f"[bold]Recording {len(observations)} prices[/bold] "
        f"[dim]price book={job.price_book_id} day={job.today}[/dim]"
    )

    try:
        with Progress(console=_err) as progress:
            task = progress.add_task("Updating...", total=len(observations))
            result = job.run(
                observations, on_progress=lambda: progress.advance(task),
            )
    finally:
        store.close()

    _err.print(
        f"[green]✓ {result.updated} updated[/green], "
        f"{result.unchanged} unchanged, {result.skipped} skipped"
    )
    if result.overflowed:
        _err.print(
            f"[yellow]{result.overflowed} histories overflowed "
            "and were discarded (see log)[/yellow]"
        )
    if not result.ok:
        _err.print(f"[red]{result.failed} items failed (see log)[/red]")
        return 1
    return 0


def show_history(
    item_id: str,
    price_book_id: str | None = None,
    today: date | None = None,
    output_format: str = "table",
    db_path: Path | None = None,
) -> int:
    """Print an item's stored history and its display amount."""
    book = price_book_id or history_price_book_id()
    store = CatalogStore(db_path)
    try:
        record = store.get_record(item_id, book)
    finally:
        store.close()

    if record is None:
        _err.print(f"[yellow]No record for {item_id} in {book}.[/yellow]")
        return 1

    ledger = PriceLedger(record.price_info, item_id, today=today)
    display = ledger.get_display_amount()

    if output_format == "table":
        _print_ledger_table(ledger, display)
        _err.print(
            f"[dim]Current amount: {record.amount}  "
            f"Lowest in window: {display if display is not None else 'n/a'}[/dim]"
        )
    else:
        json.dump(
            {
                "item_id": item_id,
                "price_book_id": book,
                "amount": record.amount,
                "status": ledger.decode_status,
                "entries": ledger.entries,
                "display_amount": display,
            },
            sys.stdout,
            indent=2,
        )
        sys.stdout.write("\n")
    return 0


def run_lookup(
    item_id: str,
    current_price: float,
    locale: str | None = None,
    db_path: Path | None = None,
) -> int:
    """Print the prior best price of an item, or ``null`` if none applies."""
    store = CatalogStore(db_path)
    try:
        lookup = PriorBestPriceLookup(store)
        prior_best = lookup.get_prior_best_price(
            item_id, current_price, locale,
        )
    finally:
        store.close()

    json.dump(
        {
            "item_id": item_id,
            "locale": locale or Settings.DEFAULT_LOCALE,
            "current_price": current_price,
            "prior_best_price": prior_best,
        },
        sys.stdout,
        indent=2,
    )
    sys.stdout.write("\n")
    return 0
