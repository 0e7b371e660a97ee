# src/config/settings.py

"""Central configuration for the price history engine."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    """Read an integer override from the environment."""
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


def _env_float(name: str, default: float) -> float:
    """Read a float override from the environment."""
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else default


class Settings:
    """Central configuration for the price history engine."""

    # --- Ledger ---
    DAYS_TO_KEEP: int = _env_int("PRICE_HISTORY_DAYS_TO_KEEP", 30)
    MAX_SIZE: int = _env_int("PRICE_HISTORY_MAX_SIZE", 256)
    DAY_KEY_FORMAT: str = "%Y%m%d"
    OVERFLOW_SENTINEL: str = "Dataset too large!"

    # --- Catalog ---
    SITE_ID: str = os.getenv("PRICE_HISTORY_SITE_ID", "default-site")
    DEFAULT_LOCALE: str = "default"

    # --- Lookup cache (seconds a lookup result stays fresh) ---
    LOOKUP_CACHE_TTL: float = _env_float(
        "PRICE_HISTORY_LOOKUP_CACHE_TTL", 900.0
    )

    # --- Logging ---
    CONSOLE_LOG_LEVEL: str = os.getenv(
        "PRICE_HISTORY_LOG_LEVEL", "WARNING"
    ).upper()
    OVERFLOW_LOG_NAME: str = "overflow.log"

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    LOGS_DIR: Path = BASE_DIR / "logs"
    CATALOG_DB_PATH: Path = Path(
        os.getenv(
            "PRICE_HISTORY_DB_PATH",
            str(DATA_DIR / "catalog.db"),
        )
    )
