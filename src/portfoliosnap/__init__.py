"""portfoliosnap: holdings export to enriched portfolio snapshot.

Parses a semi-structured holdings export, enriches each position from a
bulk quote provider and a scraped metrics provider with static fallbacks,
and aggregates the result by sector.

Quick start::

    from portfoliosnap import create_builder_from_env
    builder = create_builder_from_env()
    snapshot = builder.build()
    print(snapshot.totals.current_value)
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any

from portfoliosnap.builder import SnapshotBuilder, compute_totals, summarize_sectors
from portfoliosnap.config import PortfolioConfig, ProviderType
from portfoliosnap.errors import PortfolioError, PortfolioErrorCode
from portfoliosnap.extractors import ExtractedMetrics, LabelPatternExtractor, MetricExtractor
from portfoliosnap.loader import load_holdings, load_rows
from portfoliosnap.models.enriched import EnrichedHolding
from portfoliosnap.models.holding import Exchange, Holding
from portfoliosnap.models.quote import QuoteData
from portfoliosnap.models.snapshot import PortfolioSnapshot
from portfoliosnap.models.summary import PortfolioTotals, SectorSummary
from portfoliosnap.parser import ColumnLayout, classify_row, parse_rows
from portfoliosnap.quality import ValidationResult, validate_snapshot
from portfoliosnap.resolution import FIELD_ORDER, ResolvedQuote, resolve_quote
from portfoliosnap.store import HoldingsStore

__version__ = "0.1.0"

__all__ = [
    # Builder
    "SnapshotBuilder",
    "create_builder_from_env",
    "get_portfolio_snapshot",
    "summarize_sectors",
    "compute_totals",
    # Config
    "PortfolioConfig",
    "ProviderType",
    # Errors
    "PortfolioError",
    "PortfolioErrorCode",
    # Parsing and loading
    "ColumnLayout",
    "classify_row",
    "parse_rows",
    "load_rows",
    "load_holdings",
    "HoldingsStore",
    # Extraction and resolution
    "MetricExtractor",
    "LabelPatternExtractor",
    "ExtractedMetrics",
    "FIELD_ORDER",
    "ResolvedQuote",
    "resolve_quote",
    # Quality
    "ValidationResult",
    "validate_snapshot",
    # Models
    "Exchange",
    "Holding",
    "QuoteData",
    "EnrichedHolding",
    "SectorSummary",
    "PortfolioTotals",
    "PortfolioSnapshot",
]


def _optional_seconds(name: str, default: str) -> float | None:
    raw = os.getenv(name, default).strip()
    if not raw:
        return None
    value = float(raw)
    return value if value > 0 else None


def config_from_env() -> PortfolioConfig:
    """Build a PortfolioConfig from environment variables.

    Environment variables:
        PORTFOLIO_DATA_PATH: Holdings export path (default: "data.json").
        PORTFOLIO_PRICE_PROVIDER: Bulk price provider (default: "yahoo").
        PORTFOLIO_METRICS_PROVIDER: Scraped metrics provider (default: "google").
        YAHOO_FINANCE_URL: Bulk quote service root.
        GOOGLE_FINANCE_URL: Quote page root.
        PORTFOLIO_REQUEST_TIMEOUT: Per-request timeout in seconds (default: 10).
        PORTFOLIO_SCRAPE_DELAY: Pause after each scraped symbol (default: 0.1).
        PORTFOLIO_SCRAPE_DEADLINE: Scrape loop budget in seconds; 0 or empty
            disables it (default: 120).
        PORTFOLIO_HOLDINGS_TTL: Holdings reload interval; empty = never.
        PORTFOLIO_VALIDATE: "0" disables snapshot quality checks.
    """
    defaults = PortfolioConfig()
    return PortfolioConfig(
        data_path=os.getenv("PORTFOLIO_DATA_PATH", defaults.data_path),
        price_provider=ProviderType(
            os.getenv("PORTFOLIO_PRICE_PROVIDER", defaults.price_provider.value).strip()
        ),
        metrics_provider=ProviderType(
            os.getenv("PORTFOLIO_METRICS_PROVIDER", defaults.metrics_provider.value).strip()
        ),
        yahoo_base_url=os.getenv("YAHOO_FINANCE_URL", defaults.yahoo_base_url),
        google_base_url=os.getenv("GOOGLE_FINANCE_URL", defaults.google_base_url),
        request_timeout=float(os.getenv("PORTFOLIO_REQUEST_TIMEOUT", "10")),
        scrape_delay_seconds=float(os.getenv("PORTFOLIO_SCRAPE_DELAY", "0.1")),
        scrape_deadline_seconds=_optional_seconds("PORTFOLIO_SCRAPE_DEADLINE", "120"),
        holdings_ttl_seconds=_optional_seconds("PORTFOLIO_HOLDINGS_TTL", ""),
        validate=os.getenv("PORTFOLIO_VALIDATE", "1").strip() not in ("0", "false", "no"),
    )


def create_builder_from_env() -> SnapshotBuilder:
    """Zero-config factory: reads data path and provider settings from env vars."""
    return SnapshotBuilder(config_from_env())


@lru_cache(maxsize=1)
def _default_builder() -> SnapshotBuilder:
    return create_builder_from_env()


def get_portfolio_snapshot() -> dict[str, Any]:
    """Parameterless snapshot read for the HTTP layer.

    The builder, and with it the holdings store, is created once per
    process; each call still produces a fresh snapshot.
    """
    return _default_builder().build().to_dict()
