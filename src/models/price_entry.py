# src/models/price_entry.py

"""Price history entry and decode result models."""

from dataclasses import dataclass, field
from typing import Literal

DecodeStatus = Literal["ok", "empty", "invalid", "overflow"]


@dataclass(frozen=True)
class PriceEntry:
    """A price that became effective on ``day_key`` (``YYYYMMDD``)."""

    day_key: str
    price: float


@dataclass
class DecodedHistory:
    """Outcome of decoding a persisted price history snapshot.

    Only the ``ok`` variant carries entries.  ``empty``, ``invalid`` and
    ``overflow`` all mean "no usable history" and hold an empty map.
    Entry values are still untyped here; the validator narrows them.
    """

    status: DecodeStatus
    entries: dict[str, object] = field(default_factory=dict)

    @property
    def is_usable(self) -> bool:
        """True when the snapshot decoded to a price map."""
        return self.status == "ok"
