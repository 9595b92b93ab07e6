"""Sector and portfolio aggregate models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SectorSummary:
    """Aggregate over all holdings sharing a sector label.

    Missing per-holding current values count as zero here; ``current_value``
    and ``gain_loss`` are None only when the summed value is not positive.
    """

    sector: str
    investment: float
    current_value: float | None = None
    gain_loss: float | None = None
    gain_loss_pct: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sector": self.sector,
            "investment": self.investment,
            "currentValue": self.current_value,
            "gainLoss": self.gain_loss,
            "gainLossPct": self.gain_loss_pct,
        }


@dataclass(frozen=True)
class PortfolioTotals:
    """Grand totals. ``current_value`` is None if any holding lacks one."""

    investment: float
    current_value: float | None = None
    gain_loss: float | None = None
    gain_loss_pct: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "investment": self.investment,
            "currentValue": self.current_value,
            "gainLoss": self.gain_loss,
            "gainLossPct": self.gain_loss_pct,
        }
