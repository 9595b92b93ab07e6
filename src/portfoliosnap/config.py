"""Portfolio pipeline configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ProviderType(Enum):
    """Supported market data backends."""

    YAHOO = "yahoo"
    GOOGLE = "google"
    MOCK = "mock"


@dataclass
class PortfolioConfig:
    """Configuration for SnapshotBuilder.

    Attributes:
        data_path: Tabular holdings export (.json, .csv, .xlsx, .xls).
        price_provider: Bulk provider consulted first for CMP.
        metrics_provider: Per-symbol provider consulted first for P/E and EPS.
        yahoo_base_url: Root of the bulk quote service.
        google_base_url: Root of the scraped quote pages.
        request_timeout: Per-request timeout in seconds.
        scrape_delay_seconds: Pause after every per-symbol scrape.
        scrape_deadline_seconds: Budget for the whole scrape loop (None = unbounded).
        holdings_ttl_seconds: Holdings store refresh interval (None = never).
        validate: Whether to run quality checks on built snapshots.
    """

    data_path: str = "data.json"
    price_provider: ProviderType = ProviderType.YAHOO
    metrics_provider: ProviderType = ProviderType.GOOGLE
    yahoo_base_url: str = "https://query1.finance.yahoo.com"
    google_base_url: str = "https://www.google.com/finance"
    request_timeout: float = 10.0
    scrape_delay_seconds: float = 0.1
    scrape_deadline_seconds: float | None = 120.0
    holdings_ttl_seconds: float | None = None
    validate: bool = True
