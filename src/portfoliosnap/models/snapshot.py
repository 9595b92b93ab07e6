"""Portfolio snapshot data model: the root aggregate."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from portfoliosnap.models.enriched import EnrichedHolding
from portfoliosnap.models.summary import PortfolioTotals, SectorSummary


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Point-in-time view of the portfolio.

    Attributes:
        as_of: Build time (UTC).
        holdings: Enriched holdings in parsed order.
        sectors: Sector summaries by descending investment.
        totals: Grand totals.
    """

    as_of: datetime
    holdings: tuple[EnrichedHolding, ...]
    sectors: tuple[SectorSummary, ...]
    totals: PortfolioTotals

    @property
    def degraded(self) -> bool:
        """True when any holding relied on static fallback data."""
        return any(h.is_stale for h in self.holdings)

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable structure using camelCase field names."""
        as_of = self.as_of.astimezone(timezone.utc)
        return {
            "asOf": as_of.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "holdings": [h.to_dict() for h in self.holdings],
            "sectors": [s.to_dict() for s in self.sectors],
            "totals": self.totals.to_dict(),
            "degraded": self.degraded,
        }
