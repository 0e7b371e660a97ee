# src/services/lookup.py

"""Prior best price lookup for storefront display."""

import logging

from src.config.settings import Settings
from src.history.ledger import PriceLedger
from src.storage.catalog_store import CatalogStore, history_price_book_id
from src.storage.lookup_cache import LookupCache

logger = logging.getLogger("price_history.lookup")


def locale_country(locale: str | None) -> str | None:
    """Country part of a locale id (``de_DE`` -> ``DE``), if any."""
    if not locale or locale == Settings.DEFAULT_LOCALE:
        return None
    parts = locale.replace("-", "_").split("_")
    return parts[1].upper() if len(parts) > 1 and parts[1] else None


class PriorBestPriceLookup:
    """Read the lowest recent price of an item through a cache."""

    def __init__(
        self,
        store: CatalogStore,
        cache: LookupCache | None = None,
        days_to_keep: int | None = None,
    ) -> None:
        self.store = store
        self.cache = cache or LookupCache()
        self.days_to_keep = days_to_keep

    def get_price_book_id(self, locale: str | None = None) -> str:
        """History price book for a locale, falling back to the default."""
        key = f"priceBookForLocale_{Settings.SITE_ID}{locale}"

        def resolve() -> str:
            country = locale_country(locale)
            if country:
                candidate = history_price_book_id(country)
                if self.store.has_price_book(candidate):
                    return candidate
            return history_price_book_id()

        return self.cache.get_or_compute(key, resolve)

    def get_prior_best_price(
        self,
        item_id: str,
        current_price: float,
        locale: str | None = None,
    ) -> float | None:
        """Lowest price of the retention window, if it differs from now.

        Returns ``None`` when there is no history or when the lowest
        price equals the current one.
        """
        key = f"{item_id}{locale}"

        def load() -> float | None:
            price_book_id = self.get_price_book_id(locale)
            price_info = self.store.get_price_info(item_id, price_book_id)
            if not price_info:
                return None

            ledger = PriceLedger(
                price_info, item_id, days_to_keep=self.days_to_keep,
            )
            return ledger.get_display_amount()

        prior_best = self.cache.get_or_compute(key, load)
        if prior_best is None:
            return None

        if prior_best == current_price:
            logger.debug(
                "Prior best price of %s equals current price %s",
                item_id,
                current_price,
            )
            return None
        return prior_best
