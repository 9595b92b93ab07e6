"""Holding (static position) data model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Exchange(Enum):
    """Listing venue, decided by the type of the exchange-code cell."""

    NSE = "NSE"
    BSE = "BSE"


@dataclass(frozen=True)
class Holding:
    """Static position parsed from the holdings export.

    Attributes:
        symbol: NSE ticker (upper-cased) or BSE numeric scrip code.
        name: Instrument name as written in the export.
        purchase_price: Unit cost.
        quantity: Units held (integer or fractional).
        exchange: Venue the symbol belongs to.
        sector: Sector label in effect when the row was read.
        fallback_cmp: Static CMP used when no live price is available.
        fallback_pe_ratio: Static P/E used when no live ratio is available.
        fallback_earnings: Static latest-earnings text.
    """

    symbol: str
    name: str
    purchase_price: float
    quantity: float
    exchange: Exchange
    sector: str = "Unknown"
    fallback_cmp: float | None = None
    fallback_pe_ratio: float | None = None
    fallback_earnings: str | None = None

    @property
    def investment(self) -> float:
        """Unrounded cost basis."""
        return self.purchase_price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "purchasePrice": self.purchase_price,
            "quantity": self.quantity,
            "exchange": self.exchange.value,
            "sector": self.sector,
            "fallbackCmp": self.fallback_cmp,
            "fallbackPeRatio": self.fallback_pe_ratio,
            "fallbackEarnings": self.fallback_earnings,
        }
