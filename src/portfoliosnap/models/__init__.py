"""Portfolio data models."""

from portfoliosnap.models.enriched import EnrichedHolding
from portfoliosnap.models.holding import Exchange, Holding
from portfoliosnap.models.quote import QuoteData
from portfoliosnap.models.snapshot import PortfolioSnapshot
from portfoliosnap.models.summary import PortfolioTotals, SectorSummary

__all__ = [
    "Exchange",
    "Holding",
    "QuoteData",
    "EnrichedHolding",
    "SectorSummary",
    "PortfolioTotals",
    "PortfolioSnapshot",
]
