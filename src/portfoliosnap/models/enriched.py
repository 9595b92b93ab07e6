"""Enriched holding data model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from portfoliosnap.models.holding import Holding


@dataclass(frozen=True)
class EnrichedHolding:
    """Holding merged with resolved market data and derived metrics.

    Monetary values and percentages are rounded to 2 dp; ``None`` means the
    value could not be derived (no CMP from any source).
    """

    holding: Holding
    investment: float
    weight: float
    cmp: float | None = None
    pe_ratio: float | None = None
    latest_earnings: str | None = None
    current_value: float | None = None
    gain_loss: float | None = None
    gain_loss_pct: float | None = None
    stale_fields: tuple[str, ...] = ()

    @property
    def symbol(self) -> str:
        return self.holding.symbol

    @property
    def sector(self) -> str:
        return self.holding.sector

    @property
    def is_stale(self) -> bool:
        return bool(self.stale_fields)

    def to_dict(self) -> dict[str, Any]:
        data = self.holding.to_dict()
        data.update({
            "investment": self.investment,
            "weight": self.weight,
            "cmp": self.cmp,
            "peRatio": self.pe_ratio,
            "latestEarnings": self.latest_earnings,
            "currentValue": self.current_value,
            "gainLoss": self.gain_loss,
            "gainLossPct": self.gain_loss_pct,
            "staleFields": list(self.stale_fields),
        })
        return data
