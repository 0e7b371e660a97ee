# src/config/logging_config.py

"""Logging for price history runs.

Two files are written under ``logs/``:

* ``run_<timestamp>.log``: everything from ``price_history.*`` at DEBUG,
  one file per launch.
* ``overflow.log``: appended across runs, holds only the ledger's
  overflow reports.  Each one carries the discarded history, which is
  otherwise gone once the sentinel is persisted.

The console only shows WARNING and above unless
``PRICE_HISTORY_LOG_LEVEL`` says otherwise.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

_RUN_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(levelname)-8s | %(message)s"
_OVERFLOW_FORMAT = "%(asctime)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEDGER_LOGGER = "price_history.ledger"


class OverflowFilter(logging.Filter):
    """Pass only ERROR records of the ledger logger."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name == LEDGER_LOGGER and record.levelno >= logging.ERROR


def overflow_log_path() -> Path:
    """Location of the cross-run overflow log."""
    return Settings.LOGS_DIR / Settings.OVERFLOW_LOG_NAME


def setup_logging() -> Path:
    """Attach the run, overflow and console handlers once.

    Returns:
        Path of the log file created for this run.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    log_file = logs_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    root_logger = logging.getLogger("price_history")
    root_logger.setLevel(logging.DEBUG)

    if root_logger.handlers:
        return log_file

    run_handler = logging.FileHandler(log_file, encoding="utf-8")
    run_handler.setLevel(logging.DEBUG)
    run_handler.setFormatter(logging.Formatter(_RUN_FORMAT, _DATE_FORMAT))

    overflow_handler = logging.FileHandler(
        overflow_log_path(), mode="a", encoding="utf-8",
    )
    overflow_handler.setLevel(logging.ERROR)
    overflow_handler.addFilter(OverflowFilter())
    overflow_handler.setFormatter(
        logging.Formatter(_OVERFLOW_FORMAT, _DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(Settings.CONSOLE_LOG_LEVEL)
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))

    root_logger.addHandler(run_handler)
    root_logger.addHandler(overflow_handler)
    root_logger.addHandler(console_handler)

    root_logger.info("Logging initialised, run log: %s", log_file)
    return log_file
